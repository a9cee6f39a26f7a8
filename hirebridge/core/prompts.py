"""
HireBridge - System Prompts.

Defines the interviewer's canned messages and the oracle prompt templates
for answer scoring and the final evaluation.
"""

# -----------------------------------------------------------------------------
# Welcome Message
# -----------------------------------------------------------------------------

WELCOME_MESSAGE = (
    "Welcome. We are now commencing your formal assessment for the {role} position. "
    "We have reviewed your credentials. When you are ready, let me know and we will "
    "begin with the first question."
)


# -----------------------------------------------------------------------------
# Answer Scoring Template
# -----------------------------------------------------------------------------

SCORING_PROMPT = """You are a strict technical interviewer grading one answer.

## Question
{question}
{code_block}
## Candidate's Answer
{answer}

## Instructions
Rate the answer from 1 (wrong or empty) to 10 (complete, correct and well explained).
Judge correctness first, then depth, then clarity.

Respond with a single integer between 1 and 10 and nothing else."""


CODE_BLOCK = """
## Code Shown To The Candidate
```
{code_snippet}
```
"""


# -----------------------------------------------------------------------------
# Final Evaluation Template
# -----------------------------------------------------------------------------

EVALUATION_PROMPT = """You are writing the final assessment of a mock interview for the {role} position.

## Interview Transcript
{transcript}

## Scores
Average answer score: {avg_score:.1f}/10 over {answered} answered question(s) out of {total} asked.

## Requirements
Ground every statement in the transcript. Keep each list item under 15 words.

Respond with valid JSON only:
{{
    "score": <overall score 0-100>,
    "rating": "<Excellent | Very Good | Good | Average | Below Average>",
    "strengths": ["<strength>", "..."],
    "improvements": ["<area to improve>", "..."],
    "recommendation": "<one concrete next step for the candidate>",
    "technicalScore": <1-10>,
    "communicationScore": <1-10>,
    "problemSolvingScore": <1-10>
}}"""


TRANSCRIPT_LINE = "Q{number} [{difficulty} / {topic}]: {question}\nA{number}: {answer}\nScore: {score}"
