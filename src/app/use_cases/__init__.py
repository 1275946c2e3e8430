"""
Use Cases

Organized into domain folders:
- invitations/: Invitation lifecycle and delivery
- workflows/: Workflow state machine
- credits/: Credit ledger
- retention/: Retention sweep
- audit/: Audit logs
"""
