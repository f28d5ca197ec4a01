# app/i18n.py
from __future__ import annotations
from enum import Enum
from typing import Dict


class Language(str, Enum):
    EN = "en"
    TA = "ta"


TRANSLATIONS: Dict[Language, Dict[str, str]] = {
    Language.EN: {
        "welcome": "MentorBridge",
        "typing": "Typing Coach",
        "career": "Career & Education",
        "tally": "Tally & GST Coach",
        "interview": "Interview Simulator",
        "resume": "Resume Guide",
        "startTest": "Start Typing Test",
        "typeHere": "Start typing the text above...",
        "speed": "Speed",
        "accuracy": "Accuracy",
        "mentorFeedback": "Mentor Feedback:",
        "loadingFeedback": "Waiting for your mentor...",
        "tryAnother": "Try Another Quote",
        "recentHistory": "Recent History",
        "placeholder": "Type your message here...",
        "feedbackFallback": "Good effort! Keep practicing a little every day to build speed and accuracy.",
        "chatError": "I encountered a connection error. Please try again.",
        "chatEmpty": "I'm sorry, I couldn't generate a response.",
        "missingKey": "Error: API Key is missing. Please check your configuration.",
        "chatGreeting": "Hello! I am ready to help you with {topic}. How can I assist you today?",
        "chatCleared": "Chat cleared.",
        "chatClearHint": "Type /clear to start over.",
    },
    Language.TA: {
        "welcome": "மெண்டர்பிரிட்ஜ்",
        "typing": "தட்டச்சு பயிற்சி",
        "career": "வேலைவாய்ப்பு & கல்வி",
        "tally": "டாலி & GST பயிற்சி",
        "interview": "நேர்முகத் தேர்வு பயிற்சி",
        "resume": "ரெஸ்யூம் வழிகாட்டி",
        "startTest": "தட்டச்சு தேர்வை தொடங்கவும்",
        "typeHere": "மேலே உள்ள உரையை தட்டச்சு செய்யத் தொடங்குங்கள்...",
        "speed": "வேகம்",
        "accuracy": "துல்லியம்",
        "mentorFeedback": "வழிகாட்டியின் கருத்து:",
        "loadingFeedback": "உங்கள் வழிகாட்டிக்காக காத்திருக்கிறது...",
        "tryAnother": "மற்றொரு வாக்கியத்தை முயற்சிக்கவும்",
        "recentHistory": "சமீபத்திய வரலாறு",
        "placeholder": "உங்கள் செய்தியை இங்கே தட்டச்சு செய்யவும்...",
        "feedbackFallback": "நல்ல முயற்சி! வேகமும் துல்லியமும் அதிகரிக்க தினமும் சிறிது நேரம் பயிற்சி செய்யுங்கள்.",
        "chatError": "இணைப்பில் பிழை ஏற்பட்டது. மீண்டும் முயற்சிக்கவும்.",
        "chatEmpty": "மன்னிக்கவும், பதிலை உருவாக்க முடியவில்லை.",
        "missingKey": "பிழை: API விசை இல்லை. உங்கள் அமைப்புகளைச் சரிபார்க்கவும்.",
        "chatGreeting": "வணக்கம்! நான் உங்களுக்கு உதவ தயாராக உள்ளேன்.",
        "chatCleared": "உரையாடல் அழிக்கப்பட்டது.",
        "chatClearHint": "மீண்டும் தொடங்க /clear என தட்டச்சு செய்யவும்.",
    },
}


def tr(lang: Language, key: str) -> str:
    """Look up a UI string, falling back to English, then to the key itself."""
    table = TRANSLATIONS.get(Language(lang), TRANSLATIONS[Language.EN])
    if key in table:
        return table[key]
    return TRANSLATIONS[Language.EN].get(key, key)


def feedback_fallback(lang: Language) -> str:
    return tr(lang, "feedbackFallback")
