#!/usr/bin/env python3
"""
Timing Constants - Central Reference for Event-Time Monitoring

================================================================================
PURPOSE
================================================================================
Single source of truth for the clock, clustering and matching constants used
across the t0 monitoring modules.

================================================================================
CLOCK
================================================================================
The shared detector clock is the LHC bunch-crossing clock:
    RF frequency:       400.789 MHz
    Bunch spacing:      10 RF buckets = 24.9508 ns
    Orbit:              3564 bunch slots

Continuous time inside a timeframe is measured in picoseconds from the start
of the timeframe's first orbit:

    t(orbit, bc) = (orbit * 3564 + bc) * BC_DURATION_PS

================================================================================
EVENT TIME
================================================================================
Records closer than GAP_THRESHOLD_PS to the first record of a cluster are
grouped into one interaction candidate. A consensus time with an uncertainty
above MAX_CONSENSUS_UNCERTAINTY_PS is not compared with the reference
detector.
"""

# =============================================================================
# CLOCK
# =============================================================================

LHC_RF_FREQUENCY_HZ = 400.789e6
BUNCH_SPACING_RF_BUCKETS = 10

# Bunch crossing duration (ps)
BC_DURATION_PS = BUNCH_SPACING_RF_BUCKETS * 1e12 / LHC_RF_FREQUENCY_HZ

# Bunch slots per orbit
MAX_BUNCHES_PER_ORBIT = 3564

# Offset added before truncating a time to its BC number (ps)
HALF_BC_OFFSET_PS = 5000.0

# =============================================================================
# CLUSTERING AND MATCHING
# =============================================================================

GAP_THRESHOLD_PS = 100_000.0
MATCH_WINDOW_BC = 8

# =============================================================================
# CONSENSUS ESTIMATE
# =============================================================================

MAX_CONSENSUS_UNCERTAINTY_PS = 150.0
RECORD_RESOLUTION_PS = 120.0
NO_ESTIMATE_UNCERTAINTY_PS = 200.0
MAX_ESTIMATOR_MOMENTUM = 2.0       # GeV/c
OUTLIER_SIGMA = 3.0
MIN_MAD_PS = 10.0
MIN_RECORDS_FOR_OUTLIER_CUT = 4

# Particle hypotheses, in the order expected times are usually provided
HYPOTHESES = ("pion", "kaon", "proton")
REFERENCE_HYPOTHESIS = "pion"

# Inverse speed of light (ps/cm)
C_INV_PS_PER_CM = 33.35641

# =============================================================================
# REFERENCE DETECTOR
# =============================================================================

# Sub-timestamp slots of a reference event, in storage order
REFERENCE_TIME_SLOTS = ("AC", "A", "C", "vertex")

# =============================================================================
# SELECTION
# =============================================================================

MIN_PT = 0.1                # GeV/c
MAX_ABS_ETA = 0.8
MIN_N_CLUSTERS = 40
