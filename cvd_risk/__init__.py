"""CVD Risk Engine.

ACC/AHA Pooled Cohort Equations for 10-year cardiovascular risk, with a
healthy-reference comparison and lifestyle advisories.
"""

__version__ = "1.0.0"
