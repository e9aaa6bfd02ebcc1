"""Timekeeping System package.

Attendance policy and timekeeping engine organized by feature modules
(timezones, policies, directory, attendance) with a thin Flask controller
layer on top of service/repository layers.
"""
