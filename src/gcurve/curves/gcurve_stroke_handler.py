"""
Callback protocol for stroke emission.

CurvePrimitive.emit_strokable_parts(handler, options) walks a curve and
calls back into a StrokeHandler:

    start_curve_primitive(cp) ... end_curve_primitive(cp)
        Bracket the announcements of one primitive.

    start_parent_curve_primitive(cp) ... end_parent_curve_primitive(cp)
        Bracket announcements made on behalf of ``cp`` when the curve that is
        announced is not the one the caller asked about.

    announce_segment_interval(cp, point0, point1, num_strokes, fraction0, fraction1)
        A straight piece from point0 (at fraction0) to point1 (at fraction1).
        Linear curve types use this so consumers can be exact.

    announce_interval_for_uniform_step_strokes(cp, num_strokes, fraction0, fraction1)
        ``num_strokes`` equal fraction steps over [fraction0, fraction1];
        the handler evaluates the curve itself at each step.

All methods default to doing nothing, so handlers override only what they use.
"""


class StrokeHandler:

    def start_curve_primitive(self, cp):
        pass

    def end_curve_primitive(self, cp):
        pass

    def start_parent_curve_primitive(self, cp):
        pass

    def end_parent_curve_primitive(self, cp):
        pass

    def announce_segment_interval(self, cp, point0, point1, num_strokes, fraction0, fraction1):
        pass

    def announce_interval_for_uniform_step_strokes(self, cp, num_strokes, fraction0, fraction1):
        pass
