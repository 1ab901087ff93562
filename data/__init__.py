"""Game data files and loader"""
