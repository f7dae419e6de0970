"""Input schema descriptors and validation"""
