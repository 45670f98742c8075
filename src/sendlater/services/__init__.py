"""
Operations on emails that span the database, the scheduler, and the mail transport.
"""
