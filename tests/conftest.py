from hypothesis import HealthCheck, settings

# The first st.text() draw builds Hypothesis' unicode charmap cache, which on a
# cold .hypothesis directory trips the too_slow health check.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
