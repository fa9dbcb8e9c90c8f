"""Chain clients"""
