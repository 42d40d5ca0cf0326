"""Line-framed assistant response streams and the client conversation that consumes them."""
