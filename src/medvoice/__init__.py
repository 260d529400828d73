"""
MedVoice: voice-to-clinical-document pipeline

Turns recorded consultation audio into a transcript, a set of clinical
entities and a structured, legislatively-shaped medical document that a
clinician reviews, corrects and validates before export.
"""

__version__ = "0.1.0"
__author__ = "MedVoice Team"
__description__ = "Voice-to-clinical-document pipeline"
