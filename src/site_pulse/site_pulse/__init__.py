"""Site Pulse package.

Field-activity time tracking organized by feature modules (tracking, reports,
users) with a thin Flask controller layer over service/repository layers.
"""
