import re
from typing import List

# "@handle" at the start of the text or after whitespace / an opening bracket
AT_TOKEN_RE = re.compile(r"(^|[\s(])@([a-z0-9._+-]{1,64})\b", re.IGNORECASE)


def local_part(email: str = "") -> str:
    return str(email or "").split("@")[0].lower()


def extract_handles(text: str = "") -> List[str]:
    """Unique lower-cased @handles in order of first appearance."""
    handles = {}
    for match in AT_TOKEN_RE.finditer(str(text or "")):
        handles.setdefault(match.group(2).lower(), None)
    return list(handles)
