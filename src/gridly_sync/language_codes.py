"""
Language code mappings and grid column id helpers.

Standards:
- ISO 639-1: 2-letter language codes (en, de, sv)
- BCP 47: Language + Region codes (en-US, de-DE, sv-SE)

Grid Column Naming Convention:
The remote grid does not accept separators in column ids, so a locale code
is stored with its dash removed:
- Locale 'en-US' maps to column id 'enUS'
- Locale 'de' maps to column id 'de'
unformat_language_code() reverses the mapping for the 'xx-YY' shape only.
"""

import re
from typing import Optional, Dict

# Source: https://en.wikipedia.org/wiki/List_of_ISO_639-1_codes
ISO_639_1 = {
    'af': 'Afrikaans',
    'am': 'Amharic',
    'ar': 'Arabic',
    'ay': 'Aymara',
    'az': 'Azerbaijani',
    'bg': 'Bulgarian',
    'bn': 'Bengali',
    'bo': 'Tibetan',
    'bs': 'Bosnian',
    'ca': 'Catalan',
    'cs': 'Czech',
    'cy': 'Welsh',
    'da': 'Danish',
    'de': 'German',
    'el': 'Greek',
    'en': 'English',
    'es': 'Spanish',
    'et': 'Estonian',
    'eu': 'Basque',
    'fa': 'Persian',
    'ff': 'Fulah',
    'fi': 'Finnish',
    'fr': 'French',
    'ga': 'Irish',
    'gl': 'Galician',
    'gn': 'Guarani',
    'gu': 'Gujarati',
    'ha': 'Hausa',
    'he': 'Hebrew',
    'hi': 'Hindi',
    'hr': 'Croatian',
    'hu': 'Hungarian',
    'hy': 'Armenian',
    'id': 'Indonesian',
    'ig': 'Igbo',
    'is': 'Icelandic',
    'it': 'Italian',
    'ja': 'Japanese',
    'ka': 'Georgian',
    'kk': 'Kazakh',
    'km': 'Khmer',
    'kn': 'Kannada',
    'ko': 'Korean',
    'ky': 'Kyrgyz',
    'lb': 'Luxembourgish',
    'lo': 'Lao',
    'lt': 'Lithuanian',
    'lv': 'Latvian',
    'mg': 'Malagasy',
    'mi': 'Maori',
    'mk': 'Macedonian',
    'ml': 'Malayalam',
    'mn': 'Mongolian',
    'mr': 'Marathi',
    'ms': 'Malay',
    'mt': 'Maltese',
    'my': 'Burmese',
    'ne': 'Nepali',
    'nl': 'Dutch',
    'no': 'Norwegian',
    'om': 'Oromo',
    'or': 'Odia',
    'pa': 'Punjabi',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'qu': 'Quechua',
    'rn': 'Kirundi',
    'ro': 'Romanian',
    'ru': 'Russian',
    'rw': 'Kinyarwanda',
    'si': 'Sinhala',
    'sk': 'Slovak',
    'sl': 'Slovenian',
    'so': 'Somali',
    'sq': 'Albanian',
    'sr': 'Serbian',
    'ss': 'Swati',
    'st': 'Southern Sotho',
    'sv': 'Swedish',
    'sw': 'Swahili',
    'ta': 'Tamil',
    'te': 'Telugu',
    'tg': 'Tajik',
    'th': 'Thai',
    'tk': 'Turkmen',
    'tn': 'Tswana',
    'tr': 'Turkish',
    'ts': 'Tsonga',
    'uk': 'Ukrainian',
    'ur': 'Urdu',
    'uz': 'Uzbek',
    've': 'Venda',
    'vi': 'Vietnamese',
    'xh': 'Xhosa',
    'yo': 'Yoruba',
    'zh': 'Chinese',
    'zu': 'Zulu',
}


# BCP 47 language-region codes (common variants)
BCP_47_VARIANTS = {
    'en-US': 'English (United States)',
    'en-GB': 'English (United Kingdom)',
    'en-AU': 'English (Australia)',
    'en-CA': 'English (Canada)',

    'zh-CN': 'Chinese (Simplified, China)',
    'zh-TW': 'Chinese (Traditional, Taiwan)',

    'es-ES': 'Spanish (Spain)',
    'es-MX': 'Spanish (Mexico)',

    'pt-BR': 'Portuguese (Brazil)',
    'pt-PT': 'Portuguese (Portugal)',

    'fr-FR': 'French (France)',
    'fr-CA': 'French (Canada)',

    'de-DE': 'German (Germany)',
    'de-AT': 'German (Austria)',
    'de-CH': 'German (Switzerland)',

    'sv-SE': 'Swedish (Sweden)',
    'nl-NL': 'Dutch (Netherlands)',
    'it-IT': 'Italian (Italy)',
    'ja-JP': 'Japanese (Japan)',
    'ko-KR': 'Korean (Korea)',
}

# Combined mapping
ALL_LANGUAGE_CODES = {**ISO_639_1, **BCP_47_VARIANTS}

_COLUMN_LOCALE_PATTERN = re.compile(r'^[a-z]{2}[A-Z]{2}$')


def extract_base_language(code: str) -> str:
    """
    Extract base language from code (remove region).

    Examples:
        >>> extract_base_language('de-DE')
        'de'
        >>> extract_base_language('fr')
        'fr'
    """
    return code.split('-')[0]


def get_language_name(code: str) -> Optional[str]:
    """
    Get the full language name from code.

    Unknown regional variants fall back to the base language name with the
    region appended, e.g. 'sv-FI' -> 'Swedish (FI)'.

    Args:
        code: Language code

    Returns:
        Language name or None if the base language is unknown
    """
    if not code:
        return None
    if code in ALL_LANGUAGE_CODES:
        return ALL_LANGUAGE_CODES[code]

    base = extract_base_language(code)
    base_name = ISO_639_1.get(base)
    if base_name and base != code:
        return f"{base_name} ({code[len(base) + 1:]})"
    return base_name


def format_language_code(locale_code: str) -> str:
    """
    Convert a locale code into a grid column id.

    Examples:
        >>> format_language_code('en-US')
        'enUS'
        >>> format_language_code('de')
        'de'
    """
    return locale_code.replace('-', '')


def unformat_language_code(column_id: str) -> str:
    """
    Convert a grid column id back into a locale code.

    Only 4-character ids made of two lowercase and two uppercase letters
    get a dash reinserted; anything else is returned unchanged.

    Examples:
        >>> unformat_language_code('deDE')
        'de-DE'
        >>> unformat_language_code('de')
        'de'
        >>> unformat_language_code('meta_id')
        'meta_id'
    """
    if len(column_id) == 4 and _COLUMN_LOCALE_PATTERN.match(column_id):
        return f"{column_id[:2]}-{column_id[2:]}"
    return column_id
