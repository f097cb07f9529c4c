import re


def _safe_name(s: str) -> str:
    s = re.sub(r"[^\w\- ]+", "", s or "", flags=re.U)
    return s.strip().replace(" ", "_")[:60]
