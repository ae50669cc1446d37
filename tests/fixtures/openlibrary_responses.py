# ABOUTME: Canned Open Library API response fixtures for testing.
# ABOUTME: Provides realistic JSON dicts for the jscmd=data books API and edition records.

BOOK_DATA = {
    "title": "The Name of the Rose",
    "authors": [{"url": "https://openlibrary.org/authors/OL123A", "name": "Umberto Eco"}],
    "publishers": [{"name": "Harcourt"}],
    "publish_date": "1983",
    "number_of_pages": 512,
    "subjects": [
        {"name": "Mystery", "url": "https://openlibrary.org/subjects/mystery"},
        {"name": "historical", "url": "https://openlibrary.org/subjects/historical"},
        {"name": "Monasteries", "url": "https://openlibrary.org/subjects/monasteries"},
    ],
    "cover": {
        "small": "https://covers.openlibrary.org/b/id/240727-S.jpg",
        "medium": "https://covers.openlibrary.org/b/id/240727-M.jpg",
        "large": "https://covers.openlibrary.org/b/id/240727-L.jpg",
    },
}

BOOKS_API_RESPONSE = {"ISBN:9780156001311": BOOK_DATA}

EDITION_RESPONSE = {
    "key": "/books/OL7353617M",
    "title": "The Name of the Rose",
    "physical_format": "paperback",
    "number_of_pages": 512,
    "isbn_13": ["9780156001311"],
}

EDITION_IN_SERIES = {
    "key": "/books/OL9999M",
    "title": "Small Gods",
    "physical_format": "mass market paperback",
    "series": ["Discworld #13"],
}
