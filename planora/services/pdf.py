import logging
import re

from fpdf import FPDF

from planora.models.domain import Itinerary

logger = logging.getLogger("planora.pdf")

LATIN1_REPLACEMENTS = {
    "–": "-",
    "—": "-",
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "…": "...",
    "•": "-",
}


def latin1(text: str) -> str:
    """Core PDF fonts only cover Latin-1."""
    for char, replacement in LATIN1_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", "replace").decode("latin-1")


def day_heading(number: int, title: str) -> str:
    if re.match(r"day\s*\d", title, re.IGNORECASE):
        return title
    return f"Day {number} - {title}"


class ItineraryPDF(FPDF):
    def header(self):
        self.set_fill_color(37, 99, 235)  # Blue-600
        self.rect(0, 0, 210, 20, "F")
        self.set_font("helvetica", "B", 15)
        self.set_text_color(255, 255, 255)
        self.cell(0, 10, "Planora Trip Planner", border=0, align="R")
        self.ln(25)

    def footer(self):
        self.set_y(-15)
        self.set_font("helvetica", "I", 8)
        self.set_text_color(128, 128, 128)
        self.cell(0, 10, f"Page {self.page_no()}", align="C")


def _badge(pdf: ItineraryPDF, text: str):
    pdf.set_fill_color(5, 150, 105)  # Emerald-600
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("helvetica", "B", 12)
    label = latin1(f" {text} ")
    width = pdf.get_string_width(label) + 10
    pdf.set_x((210 - width) / 2)
    pdf.cell(width, 8, label, fill=True, align="C", new_x="LMARGIN", new_y="NEXT", border=0)


def generate_pdf(itinerary: Itinerary) -> bytes:
    logger.info(f"Starting PDF generation for {itinerary.destination}")
    pdf = ItineraryPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font("helvetica", "B", 24)
    pdf.set_text_color(31, 41, 55)  # Gray-800
    pdf.cell(0, 10, latin1(f"Trip to {itinerary.destination}"), new_x="LMARGIN", new_y="NEXT", align="C")
    pdf.ln(5)

    _badge(pdf, f"{itinerary.duration} | {itinerary.budget} budget")
    pdf.ln(6)

    pdf.set_text_color(55, 65, 81)
    pdf.set_font("helvetica", "", 11)
    pdf.multi_cell(0, 6, latin1(itinerary.overview), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(6)

    for number, day in enumerate(itinerary.days, start=1):
        # Keep the day header together with its first activity
        if 297 - pdf.get_y() - 15 < 45:
            pdf.add_page()

        pdf.set_fill_color(239, 246, 255)  # Blue-50
        pdf.rect(10, pdf.get_y(), 190, 8, "F")
        pdf.set_font("helvetica", "B", 16)
        pdf.set_text_color(37, 99, 235)
        pdf.cell(120, 8, latin1(f" {day_heading(number, day.title)}"), border=0)
        pdf.set_text_color(75, 85, 99)  # Gray-600
        pdf.set_font("helvetica", "", 12)
        pdf.cell(70, 8, latin1(f"{day.date}   "), align="R", new_x="LMARGIN", new_y="NEXT", border=0)
        pdf.ln(2)

        if day.summary:
            pdf.set_font("helvetica", "I", 10)
            pdf.multi_cell(0, 5, latin1(day.summary), new_x="LMARGIN", new_y="NEXT")
            pdf.ln(3)

        for activity in day.activities:
            if 297 - pdf.get_y() - 15 < 25:
                pdf.add_page()

            pdf.set_font("helvetica", "B", 9)
            pdf.set_text_color(5, 150, 105)  # Green
            pdf.cell(25, 6, latin1(activity.time))
            pdf.set_font("helvetica", "B", 12)
            pdf.set_text_color(0, 0, 0)
            pdf.cell(0, 6, latin1(activity.title), new_x="LMARGIN", new_y="NEXT")

            pdf.set_left_margin(35)
            pdf.set_x(35)
            if activity.description:
                pdf.set_font("helvetica", "", 10)
                pdf.set_text_color(55, 65, 81)
                pdf.multi_cell(0, 5, latin1(activity.description), new_x="LMARGIN", new_y="NEXT")
            if activity.location:
                pdf.set_font("helvetica", "I", 9)
                pdf.set_text_color(107, 114, 128)  # Gray
                pdf.cell(0, 5, latin1(activity.location), new_x="LMARGIN", new_y="NEXT")
            pdf.set_left_margin(10)
            pdf.set_x(10)

            y = pdf.get_y() + 3
            pdf.set_draw_color(229, 231, 235)
            pdf.line(10, y, 200, y)
            pdf.set_y(y + 4)

    if itinerary.tips:
        if 297 - pdf.get_y() - 15 < 30:
            pdf.add_page()
        pdf.set_font("helvetica", "B", 14)
        pdf.set_text_color(37, 99, 235)
        pdf.cell(0, 8, "Travel Tips", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("helvetica", "", 10)
        pdf.set_text_color(55, 65, 81)
        for tip in itinerary.tips:
            pdf.multi_cell(0, 5, latin1(f"- {tip}"), new_x="LMARGIN", new_y="NEXT")

    return bytes(pdf.output())
