"""
Outreach Analytics Dashboard

Campaign analytics from the Instantly v2 API: fetch, filter, aggregate, render.
"""
