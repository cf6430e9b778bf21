from sprig.markers import component

constructed = []


@component
class Chicken:
    def __init__(self, egg: "Egg"):
        constructed.append(Chicken)
        self.egg = egg


@component
class Egg:
    def __init__(self, chicken: Chicken):
        constructed.append(Egg)
        self.chicken = chicken
