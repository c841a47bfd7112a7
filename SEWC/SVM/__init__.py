# =============================================================================
# SEWC/SVM/__init__.py — Stream Verification Module
# =============================================================================
#
# Self-checks for the codec and both containers, runnable without pytest.
#
# Sub-modules:
#   validate.py  — automated test suite for the entire SEWC stack
#                  (python -m SEWC.SVM.validate)
# =============================================================================
