"""HTTP backend for mmorpgapi"""
