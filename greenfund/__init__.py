"""
GreenFund crowdfunding backend.

A FastAPI service that keeps campaigns, donations, users and submissions
in flat JSON documents on disk and serves uploaded files back statically.
"""
