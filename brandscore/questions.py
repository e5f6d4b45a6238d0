"""
brandscore/questions.py — the fixed Brand Score questionnaire (16 yes/no questions).
"""
from typing import Dict, List

from .models import Question, QuestionCategory, QuestionType

QUESTIONS: List[Question] = [
    # Strategy
    Question(id=1, category=QuestionCategory.STRATEGY, type=QuestionType.BOOLEAN,
             text="Do you allocate a significant portion (7%+) of revenue specifically to marketing growth?"),
    Question(id=2, category=QuestionCategory.STRATEGY, type=QuestionType.BOOLEAN,
             text="Is your marketing strategy guided by regular data reviews and customer behavior analysis?"),
    # Operations
    Question(id=3, category=QuestionCategory.OPERATIONS, type=QuestionType.BOOLEAN,
             text="Is your lead management process fully automated with a CRM tracking every touchpoint?"),
    Question(id=4, category=QuestionCategory.OPERATIONS, type=QuestionType.BOOLEAN,
             text="Is your sales pipeline clearly defined, predictable, and free of friction?"),
    # Visuals
    Question(id=5, category=QuestionCategory.VISUALS, type=QuestionType.BOOLEAN,
             text="Does your website engage visitors and generate a consistent flow of leads on autopilot?"),
    Question(id=6, category=QuestionCategory.VISUALS, type=QuestionType.BOOLEAN,
             text="Does your visual brand identity distinctively stand out as a market leader?"),
    # Content
    Question(id=7, category=QuestionCategory.CONTENT, type=QuestionType.BOOLEAN,
             text="Is your content roadmap clearly mapped out for the next 12 months?"),
    Question(id=8, category=QuestionCategory.CONTENT, type=QuestionType.BOOLEAN,
             text="Do you deploy high-value assets (videos, guides, tools) that consistently capture leads?"),
    # Growth (advertising)
    Question(id=9, category=QuestionCategory.GROWTH, type=QuestionType.BOOLEAN,
             text="Are your paid acquisition channels profitable, scalable, and clearly understood?"),
    Question(id=10, category=QuestionCategory.GROWTH, type=QuestionType.BOOLEAN,
             text="Do you have real-time visibility into your Cost Per Lead (CPL) across all channels?"),
    # Growth (email/SMS)
    Question(id=11, category=QuestionCategory.GROWTH, type=QuestionType.BOOLEAN,
             text="Do you actively utilize 'Lead Magnets' (free value) to capture prospect data?"),
    Question(id=12, category=QuestionCategory.GROWTH, type=QuestionType.BOOLEAN,
             text="Are your follow-up nurture sequences (Email/SMS) fully automated?"),
    # Social
    Question(id=13, category=QuestionCategory.CONTENT, type=QuestionType.BOOLEAN,
             text="Is your social media presence active, strategic, and consistent (not just noise)?"),
    Question(id=14, category=QuestionCategory.CONTENT, type=QuestionType.BOOLEAN,
             text="Does your social output directly support wider business objectives?"),
    # SEO
    Question(id=15, category=QuestionCategory.SEO, type=QuestionType.BOOLEAN,
             text="Is your content strategy specifically engineered to dominate Google Search rankings?"),
    Question(id=16, category=QuestionCategory.SEO, type=QuestionType.BOOLEAN,
             text="Is your website performance (speed, technical SEO) optimized for maximum visibility?"),
]


def catalog_by_id(questions: List[Question] = QUESTIONS) -> Dict[int, Question]:
    return {q.id: q for q in questions}
