"""
Country Standardization Module

Maps free-text travel country names onto canonical names so that
statistics and allowance eligibility see one spelling per country.
"""

from typing import Dict, Optional

# Aliases are matched case-insensitively after trimming
COUNTRY_ALIASES: Dict[str, str] = {
    # Japan
    "japan": "Japan", "jp": "Japan", "jpn": "Japan", "日本": "Japan",
    # United States
    "united states": "United States", "usa": "United States",
    "us": "United States", "u.s.": "United States", "u.s.a.": "United States",
    "america": "United States", "美國": "United States",
    # China
    "china": "China", "cn": "China", "prc": "China", "中國": "China",
    "中國大陸": "China", "大陸": "China",
    # South Korea
    "south korea": "South Korea", "korea": "South Korea", "kr": "South Korea",
    "韓國": "South Korea", "南韓": "South Korea",
    # Vietnam
    "vietnam": "Vietnam", "viet nam": "Vietnam", "vn": "Vietnam", "越南": "Vietnam",
    # Thailand
    "thailand": "Thailand", "th": "Thailand", "泰國": "Thailand",
    # Singapore
    "singapore": "Singapore", "sg": "Singapore", "新加坡": "Singapore",
    # Malaysia
    "malaysia": "Malaysia", "my": "Malaysia", "馬來西亞": "Malaysia",
    # Philippines
    "philippines": "Philippines", "ph": "Philippines", "菲律賓": "Philippines",
    # India
    "india": "India", "in": "India", "印度": "India",
    # Germany
    "germany": "Germany", "de": "Germany", "德國": "Germany",
    # Mexico
    "mexico": "Mexico", "mx": "Mexico", "墨西哥": "Mexico",
    # Hong Kong
    "hong kong": "Hong Kong", "hk": "Hong Kong", "香港": "Hong Kong",
}


def standardize_country(name, extra_aliases: Optional[Dict[str, str]] = None) -> str:
    """
    Standardize a travel country name.

    Args:
        name: Free-text country name (may be None)
        extra_aliases: User-configured aliases, checked before the built-in map

    Returns:
        Canonical country name, the trimmed input if unknown, or "" if empty
    """
    if name is None:
        return ""
    text = str(name).strip()
    if not text:
        return ""

    key = text.lower()
    if extra_aliases:
        for alias, canonical in extra_aliases.items():
            if alias.strip().lower() == key:
                return canonical
    return COUNTRY_ALIASES.get(key, text)
