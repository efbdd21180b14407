"""Scheduling for expiry alerts and reminders.

Schedule overview (local time, triggered hourly through the master dispatcher):
  - 09:00 daily - Expiry scan (documents 30/15/7/3/1 days from expiring)
  - 18:00 daily - Daily reminder (evening)
  - 21:00 daily - Daily reminder (night)
"""
