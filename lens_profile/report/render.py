from pathlib import Path
from jinja2 import Template

from lens_profile.report.view import ProfilePage
from lens_profile.util.paths import ensure_dir

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _block_kind(block) -> str:
    return type(block).__name__


def render_page_html(page: ProfilePage) -> str:
    """Render the profile page to an HTML string.

    Parameters
    ----------
    page : ProfilePage
        Profile header, feed cards and any stage errors to show the visitor.

    Returns
    -------
    str
        The complete HTML document. All API-provided text is escaped.
    """
    tpl = Template((TEMPLATES_DIR / "profile.html.j2").read_text(encoding="utf-8"), autoescape=True)
    return tpl.render(page=page, block_kind=_block_kind)


def write_profile_page(page: ProfilePage, out_dir: Path, *, filename: str = "index.html") -> Path:
    """Write the rendered page into `out_dir` (created if missing) and return its path."""
    out_dir = Path(out_dir)
    ensure_dir(out_dir)
    html_path = out_dir / filename
    html_path.write_text(render_page_html(page), encoding="utf-8")
    return html_path

