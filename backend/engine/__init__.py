"""Game resolution engines"""
