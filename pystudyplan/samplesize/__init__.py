"""
Deterministic sample size calculation for clinical study designs.

Routes a (study design, primary endpoint) pair to one closed-form formula,
applies sequential, dropout and cluster inflation, and reports the result
with every adjustment traced in its notes. Failures are returned as
results with status ``incomplete-input``, ``invalid-input`` or
``unsupported-design``, never raised.

Validates against: R packages TrialSize, gsDesign, pwr.
"""

from pystudyplan.samplesize._normal import inverse_normal_cdf, z_from_alpha, z_from_power
from pystudyplan.samplesize._common import (
    Assumptions,
    IncompleteInput,
    InvalidInput,
    RawEstimate,
    SampleSizeResult,
    SampleSizeStatus,
    UnsupportedDesign,
    is_failure,
)
from pystudyplan.samplesize._designs import (
    ADVANCED_STUDY_DESIGNS,
    SAMPLE_SIZE_METHODS,
    STUDY_DESIGNS,
    SampleSizeMethod,
    StudyDesign,
)
from pystudyplan.samplesize._adjust import (
    ADJUSTMENT_STEPS,
    Adjustment,
    apply_adjustments,
    cluster_design_effect,
    dropout_inflation,
    sequential_inflation,
)
from pystudyplan.samplesize._proportions import two_proportions_sample_size
from pystudyplan.samplesize._means import two_means_sample_size
from pystudyplan.samplesize._precision import (
    diagnostic_accuracy_sample_size,
    single_proportion_precision_sample_size,
)
from pystudyplan.samplesize._survival import logrank_sample_size
from pystudyplan.samplesize._mixed import mixed_model_sample_size
from pystudyplan.samplesize._bayesian import (
    bayesian_means_sample_size,
    bayesian_proportions_sample_size,
)
from pystudyplan.samplesize._router import ROUTING_TABLE, compute_sample_size, select_method
from pystudyplan.samplesize._batch import SensitivityResult, sample_size_sensitivity

__all__ = [
    "inverse_normal_cdf",
    "z_from_alpha",
    "z_from_power",
    "Assumptions",
    "IncompleteInput",
    "InvalidInput",
    "RawEstimate",
    "SampleSizeResult",
    "SampleSizeStatus",
    "UnsupportedDesign",
    "is_failure",
    "ADVANCED_STUDY_DESIGNS",
    "SAMPLE_SIZE_METHODS",
    "STUDY_DESIGNS",
    "SampleSizeMethod",
    "StudyDesign",
    "ADJUSTMENT_STEPS",
    "Adjustment",
    "apply_adjustments",
    "cluster_design_effect",
    "dropout_inflation",
    "sequential_inflation",
    "two_proportions_sample_size",
    "two_means_sample_size",
    "diagnostic_accuracy_sample_size",
    "single_proportion_precision_sample_size",
    "logrank_sample_size",
    "mixed_model_sample_size",
    "bayesian_means_sample_size",
    "bayesian_proportions_sample_size",
    "ROUTING_TABLE",
    "compute_sample_size",
    "select_method",
    "SensitivityResult",
    "sample_size_sensitivity",
]
