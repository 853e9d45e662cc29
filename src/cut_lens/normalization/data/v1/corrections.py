# Token rewrites applied before matching. Keys are single preprocessed
# tokens; a value may expand to several tokens.

CORRECTIONS = {
    "אנטרקוט": "אנטריקוט",
    "אנטירקוט": "אנטריקוט",
    "פאלש": "פילה מדומה",
    "false": "פילה מדומה",
    "שוקיים": "שוק",
    "כנפיים": "כנפיים עוף",
    "chicken": "עוף",
    "beef": "בקר",
    "lamb": "טלה",
    "pork": "חזיר",
    "fish": "דג",
    "breast": "חזה",
    "thigh": "שוק",
    "wings": "כנפיים",
}

# Words that describe condition or packaging, not the cut.
NOISE_WORDS = [
    "טרי",
    "קפוא",
    "מיובא",
    "מקומי",
    "פרמיום",
    "איכות",
    "מס'",
    "מס",
    "לפי משקל",
    "מוכשר",
    "צרכני",
    "חלק",
    "אדום",
    "על עצם",
    "ללא עצם",
    "עם עצם",
    "מקוצבות",
    "קוביות",
    "פרוס",
    "מיושן",
    "לבישול",
    "טחין",
]
