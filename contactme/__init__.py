"""
contactme - contact form submission API
"""
