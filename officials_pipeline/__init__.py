"""Officials data synchronization pipeline.

Reconciles the Congress.gov and OpenStates officials directories against
locally persisted fingerprints and queues human-approved change requests.
"""

__version__ = "0.1.0"
