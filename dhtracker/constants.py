"""
Centralized constants for the biomarker series schema and shared configuration.
These constants are imported by the importer, the dashboard server and the tools
so that paths and field names are not guessed in multiple places.
"""
from __future__ import annotations

import os
from typing import List, Tuple

from dotenv import load_dotenv

load_dotenv()

# Paths
INBOX_DIR: str = os.getenv("INBOX_DIR", "./labs/inbox")
DATA_DIR: str = os.getenv("DATA_DIR", "./data")
BIOMARKERS_FILE: str = "biomarkers.json"
BIOMARKERS_PATH: str = os.path.join(DATA_DIR, BIOMARKERS_FILE)

# Dashboard
DASHBOARD_HOST: str = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT: int = int(os.getenv("PORT", "3334"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Inbox scanning. Everything in SUPPORTED_EXTS is picked up; only PROCESSED_EXTS is parsed.
SUPPORTED_EXTS: Tuple[str, ...] = (".pdf", ".csv", ".htm", ".html")
PROCESSED_EXTS: Tuple[str, ...] = (".pdf",)

# Persisted point schema (JSON keys, in output order)
POINT_KEYS: List[str] = [
    "name",
    "date",
    "value",
    "units",
    "refLow",
    "refHigh",
    "abnormality",
    "isCritical",
    "source",
]

EMPTY_SERIES = {"points": [], "events": []}

# Tracked tests: (label as printed after "Test Name", canonical output name).
# Order matters: it is the per-page parse order and therefore decides which
# duplicate survives when two labels map to the same output name on one date.
TRACKED_TESTS: Tuple[Tuple[str, str], ...] = (
    # CBC
    ("Auto WBC", "WBC"),
    ("RBC", "RBC"),
    ("Hemoglobin", "Hemoglobin"),
    ("Hematocrit", "Hematocrit"),
    ("MCV", "MCV"),
    ("MCH", "MCH"),
    ("MCHC", "MCHC"),
    ("RDW", "RDW"),
    ("Platelets", "Platelets"),
    ("MPV", "MPV"),
    # Differential
    ("Auto Neutrophils Abs", "Neutrophils (abs)"),
    ("Auto Lymphocytes Abs", "Lymphocytes (abs)"),
    ("Auto Monocytes Abs", "Monocytes (abs)"),
    ("Auto Eosinophils Abs", "Eosinophils (abs)"),
    ("Auto Basophils Abs", "Basophils (abs)"),
    # Chemistry
    ("Sodium", "Sodium"),
    ("Potassium", "Potassium"),
    ("Chloride", "Chloride"),
    ("CO2", "CO2"),
    ("BUN", "BUN"),
    ("Creatinine", "Creatinine"),
    ("eGFR", "eGFR"),
    ("Glucose Random", "Glucose"),
    ("Calcium", "Calcium"),
    ("Magnesium", "Magnesium"),
    # Liver
    ("ALT", "ALT"),
    ("AST", "AST"),
    ("Alkaline Phosphatase", "Alkaline Phosphatase"),
    ("Bilirubin Total", "Bilirubin (total)"),
    ("Albumin", "Albumin"),
    # Other
    ("LDH", "LDH"),
    ("Uric Acid", "Uric Acid"),
    ("Ferritin", "Ferritin"),
)
