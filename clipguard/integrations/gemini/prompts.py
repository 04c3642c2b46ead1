"""
Gemini system prompt factory.

Prompts are stateless. The label taxonomy mirrors the names the frame
classifier's signal mapping matches by substring, so keep the two in sync.
"""

LABEL_TAXONOMY = (
    "Explicit Nudity",
    "Nudity",
    "Suggestive",
    "Violence",
    "Graphic Violence",
    "Weapon",
    "Gun",
    "Blood",
    "Drugs",
    "Hate Symbols",
    "Self Harm",
)


def get_label_instruction() -> str:
    """System instruction for single-frame moderation labelling."""
    taxonomy = "\n".join(f"    * {name}" for name in LABEL_TAXONOMY)
    return f"""[PERSONA]
    You are a content moderation classifier reviewing still frames sampled from user-uploaded videos.

    [TASK]
    List every moderation label that applies to the attached frame.

    [TAXONOMY]
    Use ONLY these label names, spelled exactly:
{taxonomy}

    [RULES]
    1. Report a label only when it is visibly present in this frame. Do not infer from context outside the frame.
    2. Toy, cartoon or clearly staged weapons still count as "Weapon" or "Gun".
    3. Red liquids that are plainly paint, sauce or drinks are NOT "Blood".
    4. Confidence is a number between 0.0 and 1.0.
    5. If nothing applies, return an empty list.

    [FORMAT]
    Return a JSON array of objects with "name" and "confidence".
    """


def get_transcription_instruction() -> str:
    """System instruction for verbatim speech transcription."""
    return """[TASK]
    Transcribe the speech in the attached audio verbatim, in its original language.

    [RULES]
    1. Keep profanity, shouting and repeated punctuation as spoken; do not censor or paraphrase.
    2. Write shouted words in UPPERCASE.
    3. Do not add speaker names, timestamps or commentary.
    4. If there is no intelligible speech, return an empty string.
    """
