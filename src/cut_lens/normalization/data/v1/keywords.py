# Order matters: the first table entry with a keyword in the text wins.
# Keywords match as substrings of the preprocessed text, except those in
# WHOLE_WORD_KEYWORDS, which must match whole tokens.

CATEGORY_KEYWORDS = {
    "בקר": ["בקר", "beef", "פרה", "שור", "עגל"],
    "עוף": ["עוף", "chicken", "תרנגולת", "פטר", "הודו", "turkey"],
    "טלה": ["טלה", "כבש", "lamb", "sheep", "עז", "גדי"],
    "חזיר": ["חזיר", "pork", "pig", "ham", "bacon"],
    "דגים": ["דג", "fish", "סלמון", "טונה", "דניס", "אמנון", "בורי", "לוקוס"],
}

CUT_TYPE_KEYWORDS = {
    "סטייק": ["סטייק", "steak", "מנה", "פרוסה"],
    "צלי": ["צלי", "roast", "רוסט"],
    "טחון": ["טחון", "ground", "קציצות", "המבורגר", "קבב"],
    "פילה": ["פילה", "fillet", "filet"],
    "שוק": ["שוק", "leg", "thigh", "drumstick"],
    "כנף": ["כנף", "wing", "כנפיים"],
    "חזה": ["חזה", "breast"],
    "צלעות": ["צלע", "rib", "צלעות", "ribs"],
    "גיד": ["גיד", "strip", "רצועה"],
    "שלם": ["שלם", "whole", "מלא"],
}

PREMIUM_KEYWORDS = [
    "פרמיום",
    "premium",
    "איכות",
    "מובחר",
    "מעולה",
    "אורגני",
    "organic",
    "חופשי",
    "free range",
    "בלק אנגוס",
    "black angus",
    "וואגיו",
    "wagyu",
    "אטלנטי",
    "נורווגי",
    "פארו",
    "ים תיכוני",
]

# Short keywords that occur inside unrelated words ("hamburger", "שמנה").
WHOLE_WORD_KEYWORDS = {"עז", "ham", "מנה", "מלא"}
