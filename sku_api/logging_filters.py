# --- Global log sanitizers: hide Woo credentials, stop HTML body spam -------------
import logging, re

_SECRET_RE   = re.compile(r'(?i)\b(consumer_key|consumer_secret|oauth_signature)=([^&\s"\']+)')
_AUTH_HDR_RE = re.compile(r'(?i)(authorization["\']?\s*[:=]\s*["\']?)(basic|bearer)\s+[A-Za-z0-9+/=._-]+')
_HTML_SIG_RE = re.compile(r'(?is)<!DOCTYPE html|<html[^>]*>')
_TITLE_RE    = re.compile(r'(?is)<title[^>]*>(.*?)</title>')
_TAG_RE      = re.compile(r'(?is)<[^>]+>')
_SCRIPT_RE   = re.compile(r'(?is)<(script|style)[^>]*>.*?</\1>')

def redact_secrets(s: str) -> str:
    s = _SECRET_RE.sub(lambda m: f"{m.group(1)}=<redacted>", s)
    return _AUTH_HDR_RE.sub(lambda m: f"{m.group(1)}{m.group(2)} <redacted>", s)

def _strip_tags(s: str) -> str:
    s = _SCRIPT_RE.sub('', s)
    s = _TAG_RE.sub(' ', s)
    return re.sub(r'\s+', ' ', s).strip()

def summarize_html(s: str, limit: int = 200) -> str:
    title = None
    m = _TITLE_RE.search(s)
    if m:
        title = _strip_tags(m.group(1))
    preview = title or _strip_tags(s)[:limit]
    return f"{preview} [HTML {len(s)} chars trimmed]"

class SanitizeFilter(logging.Filter):
    """Redact Woo API credentials and collapse large HTML blobs (WP error pages)."""
    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except Exception:
            return True
        if not isinstance(msg, str):
            return True
        clean = redact_secrets(msg)
        if len(clean) > 200 and _HTML_SIG_RE.search(clean):
            clean = summarize_html(clean)
        if clean != msg:
            record.msg = clean
            record.args = ()
        return True

def install_filters() -> None:
    """Install once on common loggers (root + uvicorn family + httpx)."""
    for name in ("", "uvicorn", "uvicorn.error", "uvicorn.access", "httpx"):
        lg = logging.getLogger(name)
        if not any(isinstance(f, SanitizeFilter) for f in lg.filters):
            lg.addFilter(SanitizeFilter())
# --------------------------------------------------------------------------------
