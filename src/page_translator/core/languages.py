"""
Supported languages for the page translation pipeline.

The set of languages is closed: the gateway only accepts these codes, and
the preference store falls back to the source language when it reads
anything else.

Author: Leonardo Pacciani-Mori
License: MIT
"""

from enum import Enum
from typing import Union

from ..config.settings import SOURCE_LANGUAGE


class Language(Enum):
    """Languages a page can be shown in."""
    EN = "en"
    HI = "hi"
    TA = "ta"
    TE = "te"
    ML = "ml"
    MR = "mr"
    BN = "bn"
    GU = "gu"
    PA = "pa"
    UR = "ur"

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return LANGUAGE_NAMES[self]

    @property
    def is_source(self) -> bool:
        return self is source_language()

    @classmethod
    def parse(cls, value: Union["Language", str]) -> "Language":
        """
        Convert a language code into a Language.

        Args:
            value: A Language or its code (case-insensitive, e.g. "hi").

        Returns:
            Language: The matching language.

        Raises:
            ValueError: If the code is not one of the supported languages.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unsupported language code {value!r}; expected one of "
                f"{', '.join(lang.value for lang in cls)}"
            ) from None


# Display names shown in the language picker.
LANGUAGE_NAMES = {
    Language.EN: "English",
    Language.HI: "हिन्दी (Hindi)",
    Language.TA: "தமிழ் (Tamil)",
    Language.TE: "తెలుగు (Telugu)",
    Language.ML: "മലയാളം (Malayalam)",
    Language.MR: "मराठी (Marathi)",
    Language.BN: "বাংলা (Bengali)",
    Language.GU: "ગુજરાતી (Gujarati)",
    Language.PA: "ਪੰਜਾਬੀ (Punjabi)",
    Language.UR: "اردو (Urdu)",
}


def source_language() -> Language:
    """Return the language the page markup is authored in."""
    return Language.parse(SOURCE_LANGUAGE)
