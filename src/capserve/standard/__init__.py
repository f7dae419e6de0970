"""Standard capabilities shipped with capserve"""
