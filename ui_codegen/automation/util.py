import re

_UNSAFE_CHARS = re.compile(r'[^0-9A-Za-z._-]+')


def auto_snapshot_name(counter: int) -> str:
    """
    Return 'codegen-1.png', 'codegen-2.png', ... for unnamed screenshots.
    """
    try:
        n = int(counter)
    except Exception:
        n = 1
    return f"codegen-{max(n, 1)}.png"


def ensure_png_name(name: str) -> str:
    """
    Sanitize a caller-supplied snapshot name and make sure it ends with '.png'.
    Path separators are flattened so names cannot escape the snapshot directory.
    """
    base = _UNSAFE_CHARS.sub('_', str(name or '').strip()).strip('._')
    if not base:
        return 'snapshot.png'
    if not base.lower().endswith('.png'):
        base += '.png'
    return base
