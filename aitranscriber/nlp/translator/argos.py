from __future__ import annotations
from .base import Translator
from aitranscriber.contracts import TranslationRequest, TranslationResult
from aitranscriber.errors import TranslationError

class ArgosTranslator(Translator):
    """Offline translation with locally installed Argos models."""

    def __init__(self, from_code: str = "en", to_code: str = "fa", auto_install: bool = True):
        self.from_code = from_code
        self.to_code = to_code
        self.auto_install = auto_install
        self._ready = False

    @property
    def name(self) -> str:
        return "argos"

    def _ensure_ready(self) -> None:
        if self._ready:
            return

        import argostranslate.package
        import argostranslate.translate

        installed = argostranslate.translate.get_installed_languages()
        have_from = any(lang.code == self.from_code for lang in installed)
        have_to = any(lang.code == self.to_code for lang in installed)

        if not (have_from and have_to):
            if not self.auto_install:
                raise TranslationError("Argos model not installed and auto_install=False")

            argostranslate.package.update_package_index()
            pkg = next(
                (
                    p
                    for p in argostranslate.package.get_available_packages()
                    if p.from_code == self.from_code and p.to_code == self.to_code
                ),
                None,
            )
            if pkg is None:
                raise TranslationError(f"No Argos package found for {self.from_code}->{self.to_code}")
            argostranslate.package.install_from_path(pkg.download())

        self._ready = True

    def translate(self, req: TranslationRequest) -> TranslationResult:
        if not (req.text or "").strip():
            return TranslationResult(source_text=req.text, translated_text="", provider=self.name)
        self._ensure_ready()
        import argostranslate.translate
        out = argostranslate.translate.translate(req.text, self.from_code, self.to_code)
        return TranslationResult(source_text=req.text, translated_text=out, provider=self.name)
