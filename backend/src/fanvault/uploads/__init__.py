"""Submission intake - image uploads into the review pipeline"""
