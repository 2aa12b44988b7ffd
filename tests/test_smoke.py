"""Smoke test to verify the package imports and exposes its public API."""

from __future__ import annotations


def test_import() -> None:
    import rosetta

    assert rosetta.__version__ == "0.1.0"


def test_public_api() -> None:
    from rosetta import (
        DEFAULT_INFER_PRIORITY,
        CanonicalMessage,
        MetadataEnvelope,
        Provider,
        TranslateOptions,
        Translator,
        TranslatorConfig,
        infer_provider,
        safe_translate,
        translate,
    )

    assert callable(translate)
    assert callable(safe_translate)
    assert callable(infer_provider)
    assert len(DEFAULT_INFER_PRIORITY) == len(Provider)
    assert Translator is not None
    assert TranslatorConfig is not None
    assert TranslateOptions is not None
    assert CanonicalMessage is not None
    assert MetadataEnvelope is not None


def test_all_is_exported() -> None:
    import rosetta

    for name in rosetta.__all__:
        assert hasattr(rosetta, name), name
