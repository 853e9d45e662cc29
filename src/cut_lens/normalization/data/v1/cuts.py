CUTS = [
    {
        "name": "אנטריקוט",
        "category": "בקר",
        "cut_type": "סטייק",
        "is_premium": False,
        "cooking_methods": ["גריל", "מחבת"],
        "variations": ["אנטרקוט", "אנטירקוט", "אנטריקוט בקר", "אנטריקוט עם עצם", "אנטריקוט ללא עצם", "entrecote", "ribeye"],
    },
    {
        "name": "פילה בקר",
        "category": "בקר",
        "cut_type": "פילה",
        "is_premium": True,
        "cooking_methods": ["גריל", "תנור"],
        "variations": ["פילה", "טנדרלוין", "tenderloin", "beef tenderloin"],
    },
    {
        "name": "פילה מדומה",
        "category": "בקר",
        "cut_type": "צלי",
        "is_premium": False,
        "cooking_methods": ["בישול ארוך"],
        "variations": ["פאלש פילה", "false fillet", "כתף מרכזי"],
    },
    {
        "name": "פרימיום רוסט",
        "category": "בקר",
        "cut_type": "צלי",
        "is_premium": True,
        "cooking_methods": ["תנור"],
        "variations": ["רוסט", "רוסט בקר", "צלי בקר", "prime rib", "rib roast"],
    },
    {
        "name": "שוק בקר",
        "category": "בקר",
        "cut_type": "שוק",
        "is_premium": False,
        "cooking_methods": ["בישול ארוך"],
        "variations": ["שוק אחורי", "שוק קדמי", "silverside", "topside", "eye of round"],
    },
    {
        "name": "צלע בקר",
        "category": "בקר",
        "cut_type": "צלעות",
        "is_premium": False,
        "cooking_methods": ["עישון", "בישול ארוך"],
        "variations": ["צלעות בקר", "צלע עם עצם", "short ribs", "צלעות קצרות"],
    },
    {
        "name": "בקר טחון",
        "category": "בקר",
        "cut_type": "טחון",
        "is_premium": False,
        "cooking_methods": ["מחבת", "גריל"],
        "variations": ["טחון", "בשר טחון", "טחון רזה", "טחון שמן", "ground beef"],
    },
    {
        "name": "חזה עוף",
        "category": "עוף",
        "cut_type": "חזה",
        "is_premium": False,
        "cooking_methods": ["מחבת", "גריל"],
        "variations": ["חזה", "פילה עוף", "חזה ללא עור", "שניצל עוף", "chicken breast", "breast fillet"],
    },
    {
        "name": "שוק עוף",
        "category": "עוף",
        "cut_type": "שוק",
        "is_premium": False,
        "cooking_methods": ["תנור", "גריל"],
        "variations": ["שוק עליון", "שוק תחתון", "thigh", "drumstick"],
    },
    {
        "name": "כנפיים עוף",
        "category": "עוף",
        "cut_type": "כנף",
        "is_premium": False,
        "cooking_methods": ["תנור", "טיגון"],
        "variations": ["כנפיים", "כנף", "כנפי עוף", "chicken wings"],
    },
    {
        "name": "עוף שלם",
        "category": "עוף",
        "cut_type": "שלם",
        "is_premium": False,
        "cooking_methods": ["תנור"],
        "variations": ["עוף", "תרנגולת", "פטר", "whole chicken"],
    },
    {
        "name": "גיד עוף",
        "category": "עוף",
        "cut_type": "גיד",
        "is_premium": False,
        "cooking_methods": ["מחבת"],
        "variations": ["גידים", "רצועות עוף", "סטריפס", "chicken strips"],
    },
    {
        "name": "שוק טלה",
        "category": "טלה",
        "cut_type": "שוק",
        "is_premium": True,
        "cooking_methods": ["תנור", "בישול ארוך"],
        "variations": ["שוק כבש", "leg of lamb", "gigot"],
    },
    {
        "name": "צלעות טלה",
        "category": "טלה",
        "cut_type": "צלעות",
        "is_premium": True,
        "cooking_methods": ["גריל"],
        "variations": ["צלעות כבש", "lamb chops", "rack of lamb", "קוטלט טלה"],
    },
    {
        "name": "כבש טחון",
        "category": "טלה",
        "cut_type": "טחון",
        "is_premium": False,
        "cooking_methods": ["גריל"],
        "variations": ["טלה טחון", "בשר כבש טחון", "ground lamb", "קבב"],
    },
    {
        "name": "צלעות חזיר",
        "category": "חזיר",
        "cut_type": "צלעות",
        "is_premium": False,
        "cooking_methods": ["עישון", "גריל"],
        "variations": ["ריבס", "pork ribs", "spare ribs", "baby back ribs"],
    },
    {
        "name": "שוק חזיר",
        "category": "חזיר",
        "cut_type": "שוק",
        "is_premium": False,
        "cooking_methods": ["עישון", "תנור"],
        "variations": ["ham", "פרושוטו", "pork leg"],
    },
    {
        "name": "פילה סלמון",
        "category": "דגים",
        "cut_type": "פילה",
        "is_premium": False,
        "cooking_methods": ["תנור", "מחבת"],
        "variations": ["סלמון", "salmon fillet", "סלמון נורווגי", "סלמון אטלנטי"],
    },
    {
        "name": "פילה דניס",
        "category": "דגים",
        "cut_type": "פילה",
        "is_premium": False,
        "cooking_methods": ["מחבת", "גריל"],
        "variations": ["דניס", "sea bream", "דניס ים תיכוני"],
    },
    {
        "name": "פילה אמנון",
        "category": "דגים",
        "cut_type": "פילה",
        "is_premium": False,
        "cooking_methods": ["מחבת"],
        "variations": ["אמנון", "tilapia", "saint peter fish"],
    },
    {
        "name": "טונה",
        "category": "דגים",
        "cut_type": "סטייק",
        "is_premium": True,
        "cooking_methods": ["מחבת", "גריל"],
        "variations": ["סטייק טונה", "tuna steak", "yellowfin tuna"],
    },
]
