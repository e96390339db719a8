"""
Indicator Pattern Set
Strings searched for in extension code and local storage
"""

# Plain indicators first, then their base64 forms. Each entry is matched on its
# own as a literal byte substring, never as a regex.
SEARCH_STRINGS = (
    "api.cyberhavenext.pro",
    "api/saveQR",
    "ads/ad_limits",
    "qr/show/code",
    "_ext_manage",
    "_ext_log",

    # base64 representations
    "YXBpLmN5YmVyaGF2ZW5leHQucHJv",
    "YXBpL3NhdmVRUg",
    "YWRzL2FkX2xpbWl0cw",
    "cXIvc2hvdy9jb2Rl",
    "ZXh0X21hbmFnZQ",
    "ZXh0X2xvZw",
)


def unique_patterns(patterns):
    """Drop duplicates and empty strings while keeping the original order"""
    seen = set()
    result = []
    for pattern in patterns:
        if not pattern or pattern in seen:
            continue
        seen.add(pattern)
        result.append(pattern)
    return tuple(result)
