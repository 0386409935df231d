"""Rendering of stock alerts for the email and chat channels."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from stockwatch.core.enums import AlertKind

_TITLES = {
    AlertKind.LOW_STOCK: "Low Stock Alert",
    AlertKind.OUT_OF_STOCK: "Out of Stock Alert",
    AlertKind.RESTOCK: "Back in Stock",
}

_SUBJECT_PREFIXES = {
    AlertKind.LOW_STOCK: "⚠️ Low Stock Alert",
    AlertKind.OUT_OF_STOCK: "❌ Out of Stock",
    AlertKind.RESTOCK: "🎉 Back in Stock",
}

_CHAT_ICONS = {
    AlertKind.LOW_STOCK: "🚨",
    AlertKind.OUT_OF_STOCK: "❌",
    AlertKind.RESTOCK: "🎉",
}


@dataclass
class AlertContext:
    kind: AlertKind
    shop_domain: str
    product_id: str
    product_title: str
    sku: Optional[str]
    quantity: int
    threshold: int
    hidden: bool = False
    republished: bool = False

    @property
    def admin_url(self) -> str:
        return f"https://{self.shop_domain}/admin/products/{self.product_id}"

    @property
    def display_sku(self) -> str:
        return self.sku or "N/A"


def _status_line(context: AlertContext) -> Optional[str]:
    if context.kind == AlertKind.OUT_OF_STOCK and context.hidden:
        return "This product has been automatically hidden from your store."
    if context.kind == AlertKind.RESTOCK and context.republished:
        return "This product has been automatically republished."
    return None


def _detail_lines(context: AlertContext) -> List[str]:
    lines = [
        f"Product: {context.product_title}",
        f"SKU: {context.display_sku}",
        f"Current Quantity: {context.quantity}",
    ]
    if context.kind == AlertKind.LOW_STOCK:
        lines.append(f"Threshold: {context.threshold}")
    return lines


def render_email(context: AlertContext) -> Dict[str, str]:
    """Returns subject, plain text body and HTML body."""
    title = f"{_TITLES[context.kind]} for {context.shop_domain}"
    lines = _detail_lines(context)
    status_line = _status_line(context)

    text_lines = [title, ""] + lines
    if status_line:
        text_lines += ["", status_line]
    text_lines += ["", f"View Product: {context.admin_url}"]

    html_parts = [f"<h2>{title}</h2>"]
    for line in lines:
        label, _, value = line.partition(": ")
        html_parts.append(f"<p><strong>{label}:</strong> {value}</p>")
    if status_line:
        html_parts.append(f"<p><strong>{status_line}</strong></p>")
    html_parts.append(f'<p><a href="{context.admin_url}">View Product in Shopify Admin</a></p>')

    return {
        "subject": f"{_SUBJECT_PREFIXES[context.kind]}: {context.product_title}",
        "body": "\n".join(text_lines),
        "html": "".join(html_parts),
    }


def render_chat(context: AlertContext) -> Dict[str, Any]:
    """Slack incoming-webhook payload (fallback text plus blocks)."""
    icon = _CHAT_ICONS[context.kind]
    title = _TITLES[context.kind]

    fields = [
        {"type": "mrkdwn", "text": f"*Product:*\n{context.product_title}"},
        {"type": "mrkdwn", "text": f"*SKU:*\n{context.display_sku}"},
        {"type": "mrkdwn", "text": f"*Current Quantity:*\n{context.quantity}"},
    ]
    if context.kind == AlertKind.LOW_STOCK:
        fields.append({"type": "mrkdwn", "text": f"*Threshold:*\n{context.threshold}"})
    elif context.hidden:
        fields.append({"type": "mrkdwn", "text": "*Status:*\n⚠️ Product Hidden"})
    elif context.republished:
        fields.append({"type": "mrkdwn", "text": "*Status:*\n✅ Product Republished"})

    return {
        "text": f"{icon} {title} for {context.shop_domain}",
        "blocks": [
            {"type": "header", "text": {"type": "plain_text", "text": f"{icon} {title}"}},
            {"type": "section", "fields": fields},
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "View in Shopify"},
                        "url": context.admin_url,
                    }
                ],
            },
        ],
    }
