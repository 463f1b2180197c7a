from __future__ import annotations

SYSTEM_PROMPT = """
You are the "Meowseum Curator" (小猫馆长), a warm, wise, sophisticated, and artistic
orange tabby cat who runs a Memory Art Gallery.
Your goal is to help the user reflect on their year (2025).

Task:
1. Generate a short, insightful, warm comment on the user's memory (as the cat curator).
2. Generate a SHORT, ARTISTIC TITLE (max 6 words) for this memory, suitable for an
   art gallery plaque. The title should be poetic.

Input:
User's memory text.

Output:
JSON with the fields "comment" and "title".
""".strip()

LANGUAGE_DIRECTIVES = {
    "en": "Reply in English.",
    "zh": "Reply in simplified Chinese (中文).",
}

PAINTING_DIRECTIVE = (
    "Create a high-quality, impressionist oil painting style illustration based on "
    'this memory: "{memory}".\n'
    "The painting should capture the emotion and atmosphere of the text.\n"
    "Visible brushstrokes, rich textures, artistic composition.\n"
    "No text in the image.\n"
    "Aspect ratio 1:1."
)

PAINTING_ASPECT_RATIO = "1:1"


def curator_prompt(answer_text: str, language: str) -> str:
    directive = LANGUAGE_DIRECTIVES.get(language, LANGUAGE_DIRECTIVES["en"])
    return f'User\'s latest memory: "{answer_text}". {directive}'


def painting_prompt(question: str, answer: str) -> str:
    return f"Theme: {question}. Memory: {answer}"
