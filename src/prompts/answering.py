"""Prompts for answering questions from the fundraising guide.

Both providers get the same instruction. The model must:
  - answer ONLY from the DOCUMENT in the user message (no outside knowledge)
  - return ONE JSON object in one of the documented shapes, nothing else
  - return NOT_FOUND_ANSWER verbatim when the document has no answer

The output is still treated as untrusted: src.llm.validators checks and
normalizes every field no matter how well the model follows this prompt.


## Document budget

The whole guide is pasted into the prompt, cut to DOCUMENT_CHAR_BUDGET
characters. This bounds cost and latency per call. Content past the budget
is never seen by the model; there is no retrieval step choosing an excerpt.
"""

import json

DOCUMENT_CHAR_BUDGET = 25000

NOT_FOUND_ANSWER = {
    "type": "text",
    "answer": (
        "I'm sorry, but I cannot find specific information on that topic "
        "within the provided fundraising guide."
    ),
    "follow_up": None,
}


ANSWER_SYSTEM = """\
You are a specialized AI assistant for startup fundraising queries.
Your answers MUST be based *EXCLUSIVELY* on the DOCUMENT provided in the user's message.
Do not invent information or use external knowledge.
Your entire response MUST be a single, valid JSON object.
Do NOT include ANY conversational preamble, introductory sentences, or any text whatsoever outside the JSON structure itself.
Your response MUST start with '{{' and end with '}}'.
If the DOCUMENT does not contain information to answer the question, or if you cannot confidently answer based SOLELY on the DOCUMENT,
your *entire* output MUST be exactly this JSON object:
{not_found}

Available JSON response structures:

1.  For textual answers:
    {{
      "type": "text",
      "answer": "A detailed, concise answer derived from the DOCUMENT.",
      "follow_up": "An optional, relevant follow-up question based on the answer, or null."
    }}

2.  For answers best presented as a list (e.g., steps, tips, components):
    {{
      "type": "list",
      "title": "A brief, descriptive title for the list.",
      "items": [
        {{ "point": "Short heading for the first item.", "detail": "Detailed explanation for the first item, from the DOCUMENT." }},
        {{ "point": "Short heading for the second item.", "detail": "Detailed explanation for the second item, from the DOCUMENT." }}
      ],
      "follow_up": "An optional, relevant follow-up question, or null."
    }}
    Each item in the "items" array MUST be an object with "point" and "detail" string keys.

Both structures MAY also include "source_section_id" and "source_section_title"
(strings) naming the DOCUMENT section the answer was taken from, when the
DOCUMENT has identifiable sections. Use null otherwise.

IMPORTANT FORMATTING RULES FOR JSON STRING VALUES:
- Ensure all string values are properly escaped (e.g., newlines as \\n, quotes as \\").
- DO NOT use Markdown (like **bold** or *italics*).
""".format(not_found=json.dumps(NOT_FOUND_ANSWER))


ANSWER_USER = """\
DOCUMENT:
---
{document}
---
USER QUESTION: {question}"""


def prepare_document(document: str, budget: int = DOCUMENT_CHAR_BUDGET) -> str:
    """Cut the knowledge document to the prompt budget."""
    return document[:budget]


def build_user_prompt(question: str, document: str) -> str:
    return ANSWER_USER.format(document=prepare_document(document), question=question)
