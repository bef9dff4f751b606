"""
Extraction Prompts.

Instructions sent to the AI tiers. Both ask for the same canonical JSON
shape so that one mapper handles every tier.
"""

CANONICAL_SHAPE = """{
  "invoiceNumber": "7-8 digit invoice number",
  "invoiceDate": "DD.MM.YYYY",
  "serviceNumber": "service nr or null",
  "projectNumber": "prosjekt nr or null",
  "customerNumber": "kundenr or null",
  "orderNumber": "ordrenr or null",
  "orderAddress": "ordreadresse or null",
  "workOrderText": "text after 'Oppdrag:' or null",
  "workPerformedText": "description of the work performed or null",
  "technicianName": "technician name or null",
  "customerName": "customer name or null",
  "customerOrgNumber": "9 digit org number or null",
  "kidNumber": "KID or null",
  "technicianHours": "hours on the T1 / service time lines or null",
  "hourlyRate": "unit price of the T1 line or null",
  "travelTimeHours": "hours on the RT1 travel time lines or null",
  "vehicleKm": "kilometres on the KM line or null",
  "totals": {"labour": 0, "travel": 0, "parts": 0, "grandTotal": 0},
  "rows": [{"code": "T1", "description": "", "quantity": 0, "unitPrice": 0, "lineTotal": 0}],
  "confidence": 85
}"""

CLASSIFICATION_RULES = """Classification rules:
- totals.labour = sum of lines whose code starts with "T" followed by a digit (T1, T2)
- totals.travel = sum of lines whose code starts with "RT" followed by a digit, plus lines with code "KM"
- totals.parts = sum of ALL other lines (materials and parts)
- totals.grandTotal = "Ordresum", "Sum avgiftsfritt" or the bottom total of the invoice
- The printed line total wins over quantity x unit price when they disagree
- All numbers are plain numbers: no currency, no thousands separators, dot as decimal mark
- Use null for fields that are not visible. Never guess a number."""

ASSISTANT_INSTRUCTION = (
    "Extract the data from the attached Norwegian supplier invoice.\n"
    "Reply with one JSON object and nothing else, in this shape:\n"
    f"{CANONICAL_SHAPE}\n\n{CLASSIFICATION_RULES}"
)

VISION_INSTRUCTION = (
    "Return ONLY valid JSON with the data of this Norwegian supplier invoice.\n"
    "Required keys (exact names):\n"
    f"{CANONICAL_SHAPE}\n\n{CLASSIFICATION_RULES}"
)
