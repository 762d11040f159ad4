"""
CityReport - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, Tuple

# =============================================================================
# REPORT CATEGORIES
# =============================================================================

# Category value -> display label
REPORT_CATEGORIES: Dict[str, str] = {
    "danger": "Danger",
    "travaux": "Travaux",
    "nuisance": "Nuisance",
    "pollution": "Pollution",
    "reparation": "Réparation",
}

# =============================================================================
# ADDRESS HANDLING
# =============================================================================

# First standalone 5-digit group in a formatted address
POSTAL_CODE_PATTERN = r"\b\d{5}\b"

# Provider placeholder for roads without a name (matched case-insensitively)
UNNAMED_ROAD_PATTERN = r"unnamed road"

# =============================================================================
# SUBMISSION
# =============================================================================

# Phase name -> (lower bound, upper bound) of overall progress
PROGRESS_PHASES: Dict[str, Tuple[float, float]] = {
    "preparing": (0.0, 0.2),
    "uploading": (0.2, 0.7),
    "finalizing": (0.7, 1.0),
}

# Labels shown next to the progress bar
PROGRESS_LABELS: Dict[str, str] = {
    "preparing": "Préparation des fichiers",
    "uploading": "Téléchargement en cours",
    "finalizing": "Finalisation, veuillez patienter",
}

DEFAULT_PHOTO_MIME_TYPE = "image/jpeg"

REPORTS_ENDPOINT = "/reports"
EVENTS_ENDPOINT = "/events"

# =============================================================================
# USER-FACING MESSAGES
# =============================================================================

MSG_NO_RESULTS = "Aucune adresse correspondante trouvée"
MSG_SEARCH_FAILED = "Impossible de rechercher l'adresse"
MSG_REVERSE_NO_RESULTS = "Impossible de déterminer l'adresse exacte"
MSG_REVERSE_FAILED = "Une erreur est survenue lors de la récupération de l'adresse"
MSG_CURRENT_LOCATION_UNRESOLVED = "Impossible de déterminer l'adresse de votre position"
MSG_BUSY = "Une soumission est déjà en cours"
MSG_USER_ID_MISSING = "Impossible de récupérer l'ID utilisateur."
MSG_INVALID_PHOTOS = "Une ou plusieurs photos ne sont pas valides."
MSG_TOO_MANY_PHOTOS = "Nombre maximum de photos atteint"

# Required field -> message
MSG_MISSING_FIELD: Dict[str, str] = {
    "title": "Le titre est obligatoire.",
    "description": "La description est obligatoire.",
    "category": "Veuillez choisir une catégorie.",
    "date": "Veuillez choisir une date.",
    "coordinate": "Veuillez sélectionner une adresse valide.",
    "photos": "Au moins une photo est obligatoire.",
}
