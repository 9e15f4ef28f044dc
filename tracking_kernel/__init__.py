"""
Tracking Kernel

Client period status tracking for a multi-tenant collections workflow:
- Status transition validation against a configurable workflow graph
- Tenant-gated statuses and reason/remarks rules
- Per-period client status records with an append-only event trail
- Read-side selectors for current status, history and period summaries
"""

__version__ = "0.1.0"
