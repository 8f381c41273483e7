"""Gifting platform microservices"""
