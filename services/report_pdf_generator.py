from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm
from reportlab.lib import colors
from decimal import Decimal
import os
from datetime import datetime

ACADEMY_NAME = os.getenv("ACADEMY_NAME", "Study Hall Academy")
ACADEMY_ADDRESS = os.getenv("ACADEMY_ADDRESS", "")
ACADEMY_PHONE = os.getenv("ACADEMY_PHONE", "")
REPORTS_DIR = os.getenv("REPORTS_DIR", os.path.join("uploads", "reports"))


def _ensure_dir(path: str):
    os.makedirs(path, exist_ok=True)


def _money(value) -> str:
    return f"{Decimal(value or 0):,.2f}"


def _draw_header(c, title: str):
    width, height = A4
    margin = 20 * mm
    y_top = height - margin
    logo_path = os.path.join(os.getcwd(), "static", "logo.png")

    text_x = margin
    if os.path.exists(logo_path):
        c.drawImage(logo_path, margin, y_top - 25 * mm, width=25 * mm, height=25 * mm, preserveAspectRatio=True, mask='auto')
        text_x = margin + 30 * mm
    c.setFont("Helvetica-Bold", 14)
    c.drawString(text_x, y_top - 10, ACADEMY_NAME)
    c.setFont("Helvetica", 9)
    line_y = y_top - 26
    for line in (ACADEMY_ADDRESS, f"Phone: {ACADEMY_PHONE}" if ACADEMY_PHONE else ""):
        if line:
            c.drawString(text_x, line_y, line)
            line_y -= 14

    header_y = y_top - 70
    c.setStrokeColor(colors.grey)
    c.setLineWidth(0.5)
    c.line(margin, header_y, width - margin, header_y)

    c.setFont("Helvetica-Bold", 12)
    c.drawString(margin, header_y - 18, title)
    c.setFont("Helvetica", 8)
    c.drawRightString(width - margin, header_y - 18, f"Generated {datetime.now().strftime('%d %b %Y %H:%M')}")
    return header_y - 36


def generate_monthly_report_pdf(aggregates: list, output_dir: str = None, filename: str = "monthly_report.pdf") -> str:
    """
    Write the monthly performance report as an A4 PDF.

    Parameters
    - aggregates: MonthlyAggregate rows, already in display order
    - output_dir: directory for the PDF (defaults to REPORTS_DIR)

    Returns the path of the written file.
    """
    output_dir = output_dir or REPORTS_DIR
    _ensure_dir(output_dir)
    file_path = os.path.join(output_dir, filename)

    c = canvas.Canvas(file_path, pagesize=A4)
    width, height = A4
    margin = 20 * mm
    title = "Monthly Performance Report"
    y = _draw_header(c, title)

    col_x = [margin, margin + 50 * mm, margin + 110 * mm, width - margin]
    headers = ["Month", "New Students", "Fees Collected", "Pending"]

    def _table_header(y):
        c.setFont("Helvetica-Bold", 10)
        c.drawString(col_x[0], y, headers[0])
        c.drawRightString(col_x[1] + 20 * mm, y, headers[1])
        c.drawRightString(col_x[2] + 20 * mm, y, headers[2])
        c.drawRightString(col_x[3], y, headers[3])
        c.setFont("Helvetica", 10)
        return y - 14

    y = _table_header(y)
    total_students = 0
    total_collected = Decimal("0")
    total_pending = Decimal("0")
    for row in aggregates:
        c.drawString(col_x[0], y, row.month)
        c.drawRightString(col_x[1] + 20 * mm, y, str(row.new_students))
        c.drawRightString(col_x[2] + 20 * mm, y, _money(row.total_collected))
        c.drawRightString(col_x[3], y, _money(row.pending))
        total_students += row.new_students
        total_collected += Decimal(row.total_collected)
        total_pending += Decimal(row.pending)
        y -= 14
        if y < 80:
            c.showPage()
            y = _table_header(_draw_header(c, title))

    if not aggregates:
        c.drawString(col_x[0], y, "No enrollments with a joining date yet.")
        y -= 14

    # Totals
    if y < 120:
        c.showPage()
        y = _draw_header(c, title)
    y -= 6
    c.line(margin, y, width - margin, y)
    y -= 18
    c.setFont("Helvetica-Bold", 11)
    c.drawString(margin, y, f"Total New Students: {total_students}")
    y -= 16
    c.drawString(margin, y, f"Total Fees Collected: {_money(total_collected)}")
    y -= 16
    c.drawString(margin, y, f"Total Pending: {_money(total_pending)}")

    c.save()
    return file_path
