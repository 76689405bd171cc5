"""
PyStudyPlan: sample size engine for clinical study planning.

Turns a study design, a primary endpoint type and a merged set of numeric
assumptions into a required sample size, or into a precise explanation of
why no number can safely be given. Protocol, consent and CRF drafting live
outside this package and consume its results.

Usage:
    from pystudyplan import samplesize
"""

import logging

__version__ = "0.1.0"

from pystudyplan import samplesize

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "samplesize",
]
