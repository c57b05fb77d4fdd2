"""Interests -- applicant requests on projects and machinery, with their threads.

- Registry: which tables and join column each interest kind uses
- Resolver: fetch an interest and its time-ordered conversation
- Replies: append moderator messages and acknowledge the interest
"""
