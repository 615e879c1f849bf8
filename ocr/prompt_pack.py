# SPDX-License-Identifier: AGPL-3.0-only

"""
Prompts for the second OCR stage.
"""

HTML_PROMPT_TEMPLATE = """Convert this text to HTML with inline CSS. Return ONLY HTML.

FORMAT:
- Wrap in <div class="page">
- Titles: <h1 style="text-align:center;font-weight:bold;font-size:20px;">
- Headings: <h2 style="font-weight:bold;font-size:16px;">
- Paragraphs: <p style="margin:8px 0;">
- Bold: <strong>
- Questions: <p><strong>N.</strong> text</p>
- No image markdown

MATH FORMULAS (IMPORTANT):
- Convert LaTeX $formula$ to readable HTML
- Superscript: V^2 -> V<sup>2</sup>
- Subscript: Q_1 -> Q<sub>1</sub>
- Fractions: 1/2 -> ½ or (1/2)
- Example: $1/2 CV^2$ -> ½ CV<sup>2</sup>
- Example: $Q_1 = 3\\mu c$ -> Q<sub>1</sub> = 3μc

TEXT:
{text}"""


TABLE_SYSTEM_PROMPT = """You are an expert at extracting clean, structured table data from messy OCR text.

## YOUR TASK:
Parse the OCR text and extract a clean table. The data is typically a handwritten or printed register/inventory list.

## DATA CLEANING RULES:
1. SEPARATE serial numbers from codes (e.g., "18. P318805" -> sr_no: "18", code: "P318805")
2. CLEAN quantities - extract only numbers (e.g., "08" or "04")
3. CLEAN types - common values: "T", "TBNT", "BNT", "Tank", "Header" etc.
4. DIMENSIONS go in separate column if present (e.g., "8440 x 355")
5. REMOVE noise: random symbols, illegible text fragments, stray marks
6. PRESERVE all meaningful columns found in the source

## COLUMN DETECTION:
- Look for patterns: serial number | code | quantity | type | dimensions | remarks
- Column count varies - extract ALL columns you find
- Use descriptive header names: sr_no, code, qty, type, dimensions, remarks, date, time, etc.

## OUTPUT (ONLY valid JSON, no explanations):
{
  "table": [
    {"sr_no": "1", "code": "P123456", "qty": "04", "type": "T"},
    {"sr_no": "2", "code": "R789012", "qty": "02", "type": "BNT", "dimensions": "7310 x 355"}
  ]
}

CRITICAL: Return ONLY the JSON object. No markdown, no explanations, no text before or after."""


def build_html_prompt(text: str) -> str:
    """Prompt that turns OCR text into styled HTML."""
    return HTML_PROMPT_TEMPLATE.format(text=text)


def build_table_prompt(text: str) -> str:
    """User prompt for the table stage; pairs with TABLE_SYSTEM_PROMPT."""
    return f"Extract clean table data from this OCR text:\n\n{text}"


NO_TABLE_SENTINEL = "NO_TABLE_DATA_FOUND"

CSV_PROMPT_TEMPLATE = """You are a data extraction expert. Look at this {source} and extract ALL table data you can find.

INSTRUCTIONS:
1. Find any tables, spreadsheets, or tabular data
2. Extract ALL rows and columns accurately
3. Return the data in PURE CSV format (comma-separated values)
4. Use commas to separate columns
5. Use newlines to separate rows
6. If a cell contains commas, wrap it in double quotes
7. Include the header row if visible
8. Do NOT include any explanations, markdown, or code blocks
9. Return ONLY the raw CSV data, nothing else

If no table data is found, return: "{sentinel}\""""


def build_csv_prompt(is_pdf: bool) -> str:
    """Vision prompt that reads a table from the attached image as CSV."""
    return CSV_PROMPT_TEMPLATE.format(
        source="document" if is_pdf else "image",
        sentinel=NO_TABLE_SENTINEL,
    )
