"""Constants and configuration defaults for docforge.

Centralizes all module-level constants, defaults, and static text
used across the docforge codebase. Individual modules import from here
rather than defining constants inline.
"""


# =============================================================================
# Response schema
# =============================================================================

# Top-level keys of the model response, in declaration order. The fuzzy
# extractor uses the successor of each key as the end marker of its value.
SUMMARY_KEY = "summary"
PDF_CODE_KEY = "pdfMakeCode"
EXCEL_CODE_KEY = "excelJSCode"
DATA_KEY = "extractedData"
SCHEMA_KEYS = (SUMMARY_KEY, PDF_CODE_KEY, EXCEL_CODE_KEY, DATA_KEY)

# Function names the model is instructed to emit for each code field
PDF_FUNCTION_NAME = "exportPDF"
EXCEL_FUNCTION_NAME = "exportToExcel"

# Recognized summary.fileType values
FILE_TYPES = frozenset({"pdf", "excel", "image", "json", "unknown"})
UNKNOWN_FILE_TYPE = "unknown"
DEFAULT_SUMMARY_TITLE = "Generated Document"


# =============================================================================
# Sentinels and synthetic preambles
# =============================================================================

PDF_FAILURE_SENTINEL = "// PDF generation code failed to generate."
EXCEL_FAILURE_SENTINEL = "// Excel generation code failed to generate."

PDF_PREAMBLE = (
    "// Imports added by system\n"
    "import { text } from '@/plugins/pdfmake-style';\n\n"
)
EXCEL_PREAMBLE = (
    "// Imports added by system\n"
    "import ExcelJS from 'exceljs';\n"
    "import { saveAs } from 'file-saver';\n\n"
)

# Fuzzy-extracted code shorter than this is considered a failed capture
DEFAULT_MIN_CODE_LENGTH = 50


# =============================================================================
# Diagnostics
# =============================================================================

EMPTY_RESPONSE_MESSAGE = "Empty response from AI."
MALFORMED_RESPONSE_MESSAGE = (
    "Failed to parse AI response. "
    "The model output was likely truncated or malformed."
)
TOKEN_LIMIT_MESSAGE = (
    "Input too large: The Reference Library or Target File "
    "exceeds the token limit."
)
BAD_REQUEST_MESSAGE = "API Error 400: Bad Request."


# =============================================================================
# Model defaults
# =============================================================================

# litellm uses the "gemini/" prefix for Google AI Studio.
DEFAULT_MODEL = "gemini/gemini-3-pro-preview"
DEFAULT_EXPLAIN_MODEL = "gemini/gemini-2.5-flash"

DEFAULT_LLM_TIMEOUT = 120
DEFAULT_MAX_RETRIES = 3
DEFAULT_TEMPERATURE = 0.2
EXPLAIN_TEMPERATURE = 0.4

# Backoff before retry n is RETRY_BASE_DELAY * 2**n seconds
RETRY_BASE_DELAY = 1.0

# Prompt size limits
MAX_REFERENCE_FILES = 3
MAX_REFERENCE_CHARS = 50000
MAX_TARGET_CHARS = 30000
MAX_EXPLAIN_CHARS = 15000
TRUNCATION_MARKER = "\n...[TRUNCATED]"


# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = """You are an expert Document Layout Analyst and Frontend Engineer.
Analyze the "Target" (PDF, Excel, Image, or JSON) and generate specific JS code (pdfmake/ExcelJS) to recreate it.

**OCR PRECISION PROTOCOL (CRITICAL):**
1. **VERBATIM EXTRACTION**: Extract text exactly as it appears. Do not summarize or autocorrect.
2. **THAI LANGUAGE SUPPORT**: Pay extreme attention to Thai vowels and tone marks. Ensure they are attached to the correct consonants and not dropped.
3. **NUMERICAL ACCURACY**: Ensure IDs, prices, dates, and amounts are digit-perfect.
4. **TABLE STRUCTURE**: Identify merged cells (rowspan/colspan) accurately, even if borders are faint.

Reference Library Strategy:
1. **CHECK Reference Files first.**
2. If a Reference File contains **CODE** (JS/JSON), **ADAPT** that code structure for the Target.
3. If a Reference File is a visual document, use it as a layout template.

Output Schema (Strict JSON):
{
  "summary": {
    "fileType": "pdf|excel|image|json",
    "detectedTables": { "count": number, "dimensions": ["string"] },
    "headers": { "title": "string", "subtitle": "string" },
    "matchedTemplate": { "isMatch": boolean, "templateName": "string" }
  },
  "pdfMakeCode": "string", // ASYNC FUNCTION 'exportPDF(data)' returning docDefinition.
  "excelJSCode": "string", // ASYNC FUNCTION 'exportToExcel(data)'.
  "extractedData": [] | {} // The data passed to functions. Can be Array or Object.
}

RULES:
1. **pdfmake**:
   - Return async function 'exportPDF(data)'.
   - The 'data' argument passed to exportPDF exactly matches 'extractedData' (Array or Object).
   - **NEVER** access properties of potentially undefined objects (use optional chaining).
   - If 'data' is null, undefined, or empty, return a valid document definition with a "No Data Available" message.
   - Break docDefinition into helper functions (e.g. `createHeader`, `createTable`).
   - Use 'layout: lightHorizontalLines'.
   - Define every variable you use.
   - **Fill-in Lines**: Use `'.'.repeat(N)` with an integer literal N. Approx 2pt/dot. Page width ~515pt.

2. **ExcelJS**:
   - Return async function 'exportToExcel(data)'.
   - Use 'exceljs' and 'file-saver'.
   - Check if data exists before iterating.

3. **General**:
   - **JSON Format**: Standard JSON. Do NOT double-escape newlines. Use actual newlines in strings if needed, or single escape \\n.
   - **Conciseness**: Minimize comments.
"""

ANALYZE_INSTRUCTION = "Analyze the target above. Provide the output JSON."

EXPLAIN_PROMPT = """Explain this {kind} code to a developer.
Focus on: Structure, Data Mapping, and Styling.
Use Markdown.

CODE:
{code}
"""

# Passed through by litellm for gemini/ models only
GEMINI_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]
