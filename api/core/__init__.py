"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that multiple features use
(DB wiring, env settings, logging, errors, media storage, and the
Razorpay/SES clients). Keep feature-specific SQL and business logic
in the corresponding feature package (e.g. `courses/`).
"""
