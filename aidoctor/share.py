# aidoctor/share.py
from typing import Dict
from urllib.parse import quote

from . import config

PLATFORMS = ("twitter", "facebook", "linkedin", "whatsapp")


def doctor_summary(approved_consultations: int, total_points: int) -> str:
    return (
        f"I've reviewed {approved_consultations} consultations and earned "
        f"{total_points} points on AI Doctor!"
    )


def fundraiser_summary(total_raised: float, consultations_helped: int) -> str:
    return f"I've helped raise ${total_raised:.2f} for {consultations_helped} patients on AI Doctor!"


def share_url(platform: str, text: str, url: str) -> str:
    t, u = quote(text, safe=""), quote(url, safe="")
    if platform == "twitter":
        return f"https://twitter.com/intent/tweet?text={t}&url={u}"
    if platform == "facebook":
        return f"https://www.facebook.com/sharer/sharer.php?u={u}&quote={t}"
    if platform == "linkedin":
        return f"https://www.linkedin.com/sharing/share-offsite/?url={u}"
    if platform == "whatsapp":
        return f"https://wa.me/?text={quote(text + ' ' + url, safe='')}"
    raise ValueError(f"Unsupported platform: {platform}")


def share_links(text: str, url: str = None) -> Dict[str, str]:
    url = url or config.PUBLIC_APP_URL
    return {p: share_url(p, text, url) for p in PLATFORMS}
