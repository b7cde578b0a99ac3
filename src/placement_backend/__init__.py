"""Campus placement portal backend: application status workflow and ATS scoring."""

__version__ = "0.1.0"
