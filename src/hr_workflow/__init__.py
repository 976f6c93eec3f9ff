"""HR workflow package.

Feature packages (employees, attendance, leave, requests) keep the usual
model / repository / service / controller split. The approval workflow core
lives in ``policy`` (geo/time validation and the justification gate) and
``requests`` (the approval chain resolver, the ledger and the guard).
"""
