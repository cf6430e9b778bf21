class Constants:
    number = "1"
    numbers = "1,2,3"
    numbersDouble = "1.5,2.5,3.5"
    numbersSet = "1,2,3"
    boolMap = "true:1,false:0"
