"""Prompt templates sent to the model."""

from .rating import CleanCodeRating

CLEAN_CODE_CHAPTERS = (
    "1 - Clean Code; 2 - Meaningful Names; 3 - Functions; 4 - Comments; 5 - Formatting; "
    "6 - Objects and Data Structures; 7 - Error Handling; 8 - Boundaries; 9 - Unit Tests; "
    "10 - Classes; 11 - Systems; 12 - Emergence; 13 - Concurrency; 14 - Successive Refinement; "
    "15 - JUnit Internals; 16 - Refactoring SerialDate; 17 - Smells and Heuristics."
)


def build_analysis_prompt(file_content: str) -> str:
    return f"""You are a senior Clean Code reviewer. Evaluate the code below.

Give integer scores from 1 to 10 for the keys: variableScore, functionScore, commentScore, cohesionScore, deadCodeScore.
Include a "justifications" object with one text per criterion, using EXACTLY the keys:
VariableNaming, FunctionSizes, NoNeedsComments, MethodCohesion, DeadCode.
If you are unsure about a score, pick the most appropriate integer between 1 and 10.

Clean Code chapter index for reference:
{CLEAN_CODE_CHAPTERS}

CODE:
{file_content}

Format example (structure only):
{{
  "variableScore": 8,
  "functionScore": 7,
  "commentScore": 9,
  "cohesionScore": 8,
  "deadCodeScore": 10,
  "justifications": {{
    "VariableNaming": "Reason for the score",
    "FunctionSizes": "Reason for the score",
    "NoNeedsComments": "Reason for the score",
    "MethodCohesion": "Reason for the score",
    "DeadCode": "Reason for the score"
  }}
}}

Mandatory rules:
- Use only integers from 1 to 10.
- The justifications keys MUST be exactly the five above.
- Return ONLY the JSON object, no other text or markdown formatting."""


def build_suggestions_prompt(file_content: str, rating: CleanCodeRating) -> str:
    focus = ", ".join(rating.lowest_criteria)
    return f"""Write 3 to 5 objective suggestions to improve the code below, based on its current Clean Code scores.
Focus first on the lowest-scoring criteria: {focus}.

Each item must have exactly these keys: title, description, priority, type, difficulty, studyResources.
Allowed priorities: Low, Medium, High. Allowed difficulties: Easy, Medium, Hard.
Allowed types: CodeStyle, Structure, Documentation, Cohesion, DeadCode, ErrorHandling, Testing, Performance.
studyResources is a list of texts naming the relevant Clean Code chapters, e.g. "Clean Code - Chapter 2: Meaningful Names".

Clean Code chapter index:
{CLEAN_CODE_CHAPTERS}

CURRENT SCORES (1-10):
- Variable Naming: {rating.variable_naming}
- Function Sizes: {rating.function_sizes}
- No Needs Comments: {rating.no_needs_comments}
- Method Cohesion: {rating.method_cohesion}
- Dead Code: {rating.dead_code}

CODE:
{file_content}

Format example (structure only):
[
  {{
    "title": "Improve variable naming",
    "description": "Use descriptive, consistent names for variables and parameters",
    "priority": "Medium",
    "type": "CodeStyle",
    "difficulty": "Easy",
    "studyResources": ["Clean Code - Chapter 2: Meaningful Names"]
  }}
]

Return ONLY the JSON array, no other text or markdown formatting."""


def build_analysis_repair_prompt(broken_json: str) -> str:
    return f"""The JSON below is malformed. Fix it, keeping exactly the same structure and data and only correcting syntax problems such as extra commas, missing quotes or bad line breaks.

BROKEN JSON:
{broken_json}

Return ONLY the corrected JSON, with no explanation. It must have exactly this structure:
{{
  "variableScore": number,
  "functionScore": number,
  "commentScore": number,
  "cohesionScore": number,
  "deadCodeScore": number,
  "justifications": {{
    "VariableNaming": "text",
    "FunctionSizes": "text",
    "NoNeedsComments": "text",
    "MethodCohesion": "text",
    "DeadCode": "text"
  }}
}}"""


def build_suggestions_repair_prompt(broken_json: str) -> str:
    return f"""The JSON array below is malformed. Fix it, keeping exactly the same data and only correcting syntax problems such as extra commas or broken structure.

BROKEN JSON:
{broken_json}

Return ONLY the corrected JSON array, with no explanation. It must be a valid array with this structure:
[
  {{
    "title": "text",
    "description": "text",
    "priority": "Medium",
    "type": "CodeStyle",
    "difficulty": "Easy",
    "studyResources": ["resource1", "resource2"]
  }}
]"""
