"""
Store-related email templates.
"""

from decimal import Decimal
from typing import Optional

from libs.common.emails.core import send_email


def _money(amount: Decimal, currency: str) -> str:
    return f"{currency} {amount:,.2f}"


def _format_address(address: Optional[dict]) -> str:
    if not address:
        return ""
    parts = [
        f"{address.get('first_name', '')} {address.get('last_name', '')}".strip(),
        address.get("address_line1", ""),
        address.get("address_line2") or "",
        f"{address.get('city', '')}, {address.get('state', '')} {address.get('zip_code', '')}".strip(),
        address.get("country", ""),
    ]
    return "\n".join(p for p in parts if p)


async def send_store_order_confirmation_email(
    to_email: str,
    customer_name: str,
    order_number: str,
    items: list[dict],  # [{"name": str, "quantity": int, "line_total": Decimal}]
    subtotal: Decimal,
    tax: Decimal,
    shipping: Decimal,
    total: Decimal,
    payment_method: str,
    shipping_address: Optional[dict] = None,
    currency: str = "USD",
) -> bool:
    """
    Send the order confirmation email right after checkout.
    """
    subject = f"Order Confirmation - {order_number}"

    items_text = "\n".join(
        f"  - {item['name']} x{item['quantity']} - {_money(item['line_total'], currency)}"
        for item in items
    )
    items_html = "".join(
        f"<tr><td>{item['name']}</td><td style='text-align:center'>{item['quantity']}</td>"
        f"<td style='text-align:right'>{_money(item['line_total'], currency)}</td></tr>"
        for item in items
    )
    address_text = _format_address(shipping_address)
    shipping_text = _money(shipping, currency) if shipping > 0 else "Free"

    body = f"""Hi {customer_name},

Thank you for your order! We've received it and will keep you posted as it moves along.

Order {order_number}

Items:
{items_text}

Subtotal: {_money(subtotal, currency)}
Tax: {_money(tax, currency)}
Shipping: {shipping_text}
Total: {_money(total, currency)}

Payment method: {payment_method.replace("_", " ")}

Shipping to:
{address_text}

Thank you for shopping with us!
"""

    html_body = f"""
<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1>Order Confirmed</h1>
        <p>Order {order_number}</p>
        <p>Hi {customer_name},</p>
        <p>Thank you for your order! We've received it and will keep you posted as it moves along.</p>
        <table style="width: 100%; border-collapse: collapse;">
            <thead>
                <tr><th>Item</th><th style="text-align:center">Qty</th><th style="text-align:right">Total</th></tr>
            </thead>
            <tbody>
                {items_html}
            </tbody>
        </table>
        <p>Subtotal: {_money(subtotal, currency)}</p>
        <p>Tax: {_money(tax, currency)}</p>
        <p>Shipping: {shipping_text}</p>
        <p><strong>Total: {_money(total, currency)}</strong></p>
        <p><strong>Shipping to</strong><br/>{address_text.replace(chr(10), "<br/>")}</p>
    </div>
</body>
</html>
"""

    return await send_email(to_email, subject, body, html_body)
