# billdesk/services/pdf.py
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from billdesk.models.clients import Invoice


def render_invoice_pdf(invoice: Invoice) -> bytes:
    """Render a single-page invoice. Client details come from the relationship."""
    buffer = BytesIO()
    width, height = A4
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(invoice.number or f"invoice-{invoice.id}")

    x = 20 * mm
    y = height - 25 * mm

    pdf.setFont("Helvetica-Bold", 18)
    pdf.drawString(x, y, f"Invoice {invoice.number}")

    pdf.setFont("Helvetica", 10)
    y -= 8 * mm
    pdf.drawString(x, y, f"Issued: {invoice.created_at:%Y-%m-%d}" if invoice.created_at else "Issued: -")
    pdf.drawRightString(width - x, y, f"Status: {invoice.status.value}")

    client = invoice.client
    y -= 14 * mm
    pdf.setFont("Helvetica-Bold", 11)
    pdf.drawString(x, y, "Bill to")
    pdf.setFont("Helvetica", 10)
    for line in [client.name, *(client.address or "").splitlines(), client.email or ""]:
        if not line:
            continue
        y -= 5 * mm
        pdf.drawString(x, y, line)

    y -= 16 * mm
    pdf.line(x, y + 4 * mm, width - x, y + 4 * mm)
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(x, y - 2 * mm, "Amount due")
    pdf.drawRightString(width - x, y - 2 * mm, f"{invoice.amount:,.2f} {invoice.currency}")

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
