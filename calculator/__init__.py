"""
Calculator Django application.

This app resolves e-commerce product URLs into product records and
estimates the cost of shipping them to Bermuda.
"""
