"""Keyword tables used to classify imported transactions by description."""

EXPENSE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Sosyal/Keyif",
        (
            "starbucks",
            "kahve",
            "coffee",
            "sinema",
            "cinema",
            "film",
            "movie",
            "konser",
            "concert",
            "eğlence",
            "entertainment",
            "oyun",
            "game",
            "netflix",
            "spotify",
            "cafe",
            "kafe",
            "restoran",
            "restaurant",
            "bar",
            "pub",
        ),
    ),
    (
        "Beslenme",
        (
            "yemek",
            "food",
            "market",
            "migros",
            "bim",
            "a101",
            "şok",
            "carrefour",
            "yemekhane",
            "cafeteria",
            "mcdonald",
            "burger",
            "pizza",
            "dominos",
            "yemek sepeti",
            "getir",
            "trendyol yemek",
        ),
    ),
    (
        "Ulaşım",
        (
            "otobüs",
            "bus",
            "metro",
            "metrobüs",
            "tramvay",
            "tram",
            "taksi",
            "taxi",
            "uber",
            "bitaksi",
            "akbil",
            "istanbulkart",
            "istanbul kart",
            "bilet",
            "ticket",
            "yol",
            "transport",
            "ulaşım",
        ),
    ),
    (
        "Sabitler",
        (
            "kira",
            "rent",
            "fatura",
            "bill",
            "elektrik",
            "electricity",
            "su",
            "water",
            "doğalgaz",
            "gas",
            "internet",
            "telefon",
            "phone",
            "abonelik",
            "subscription",
            "yurt",
            "dormitory",
            "dorm",
        ),
    ),
    (
        "Okul",
        (
            "okul",
            "school",
            "üniversite",
            "university",
            "kayıt",
            "registration",
            "harç",
            "tuition",
            "kitap",
            "book",
            "kırtasiye",
            "stationery",
            "ders",
            "course",
            "sınav",
            "exam",
        ),
    ),
)

INCOME_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("KYK/Burs", ("kyk", "burs", "bursu", "scholarship", "grant")),
    ("Aile Harçlığı", ("aile", "harçlık", "harçlığı", "allowance", "pocket money", "aile desteği")),
    ("Freelance/Ek İş", ("freelance", "ek iş", "part time", "part-time", "proje", "project", "gig")),
)

# Used when no keyword matches, or when the match belongs to the other transaction type.
FALLBACK_INCOME_CATEGORY = "Freelance/Ek İş"
FALLBACK_EXPENSE_CATEGORY = "Sosyal/Keyif"
