"""Mail templates rendered with Jinja2.

Rendering is lenient: a missing field renders as an empty string and a
non-numeric amount renders as "€—", so a sloppy caller produces a slightly
worse mail instead of an exception.
"""

from dataclasses import dataclass
from typing import Any

from jinja2 import ChainableUndefined, DictLoader, Environment, TemplateNotFound

from config.settings import settings
from src.at_common.enums import MailTemplate
from src.at_common.money import format_eur

_SUBJECTS: dict[str, str] = {
    MailTemplate.BID_CONFIRMATION.value: "Bid Confirmation - ATELIER",
    MailTemplate.AUCTION_WON.value: "Congratulations! You Won - ATELIER",
    MailTemplate.AUCTION_SOLD.value: "Your Piece Has Sold - ATELIER",
}

_BODIES: dict[str, str] = {
    MailTemplate.BID_CONFIRMATION.value: """
<h2>Bid Confirmation</h2>
<p>Your bid of {{ amount | eur }} has been placed on "{{ auction_title }}".</p>
<p><a href="{{ app_url }}/piece/{{ auction_id }}">View the piece</a></p>
""",
    MailTemplate.AUCTION_WON.value: """
<h2>Congratulations! You Won!</h2>
<p>You are the winning bidder for "{{ auction_title }}".</p>
<p>Winning bid: {{ amount | eur }}</p>
<p>Please complete payment within 48 hours.</p>
<p><a href="{{ app_url }}/checkout/{{ auction_id }}">Complete checkout</a></p>
""",
    MailTemplate.AUCTION_SOLD.value: """
<h2>Your Piece Has Sold</h2>
<p>"{{ auction_title }}" closed with a winning bid of {{ amount | eur }}.</p>
<p>We will let you know once the collector has paid.</p>
""",
}


def _eur(value: Any) -> str:
    if isinstance(value, bool):
        return "€—"
    if isinstance(value, int):
        return format_eur(value)
    if isinstance(value, float):
        return format_eur(round(value))
    try:
        return format_eur(int(str(value)))
    except (TypeError, ValueError):
        return "€—"


_env = Environment(
    loader=DictLoader(_BODIES),
    undefined=ChainableUndefined,
    autoescape=True,
)
_env.filters["eur"] = _eur


@dataclass(frozen=True)
class RenderedMail:
    subject: str
    html: str


def render(template_name: str, data: dict[str, Any] | None) -> RenderedMail:
    """Render a template by name.

    Raises:
        TemplateNotFound: unknown template name.
    """
    subject = _SUBJECTS.get(template_name)
    if subject is None:
        raise TemplateNotFound(template_name)
    context = {"app_url": settings.APP_URL}
    if isinstance(data, dict):
        context.update(data)
    html = _env.get_template(template_name).render(**context)
    return RenderedMail(subject=subject, html=html)
